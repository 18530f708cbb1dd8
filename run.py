import os
from promptswitch import create_app
from promptswitch.extensions import db
from promptswitch.cli.prompt_commands import init_prompt_commands

# Create the Flask app instance using the application factory
# It will load the config based on FLASK_CONFIG or default to 'development'
config_name = os.getenv('FLASK_CONFIG') or 'default'
app = create_app(config_name)


@app.shell_context_processor
def make_shell_context():
    """Provides a shell context for `flask shell` command."""
    from promptswitch.models.prompt import Prompt
    from promptswitch.services.prompt_store import prompt_store
    return {'db': db, 'Prompt': Prompt, 'prompt_store': prompt_store}


@app.cli.command('create-db')
def create_db_command():
    """Creates the database tables."""
    with app.app_context():
        db.create_all()
    print('Database tables created.')


# Register modular CLI commands
init_prompt_commands(app)

if __name__ == '__main__':
    # The service is meant for one local user; keep it on the loopback interface.
    host = '127.0.0.1'
    port = int(os.getenv('PORT', '5000'))
    print(f"API docs available at: http://{host}:{port}/api/docs/")
    app.run(host=host, port=port, threaded=True)
