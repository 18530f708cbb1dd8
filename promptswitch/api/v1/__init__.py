from flask import Blueprint

# Import individual route blueprints
from .prompt_routes import prompts_bp

# Create a master blueprint for the v1 API
api_v1 = Blueprint('api_v1', __name__)

# Register the individual blueprints onto the master v1 blueprint
api_v1.register_blueprint(prompts_bp)
