import json as _json

from flask import request, jsonify, Blueprint, current_app
from promptswitch.extensions import db
from promptswitch.errors import InvalidInputError, NotFoundError, PromptSwitchError
from promptswitch.services import prompt_service


prompts_bp = Blueprint("prompts", __name__)

# camelCase keys accepted from clients, mapped to record fields
_WIRE_ALIASES = {"createdAt": "created_at", "updatedAt": "updated_at"}


@prompts_bp.route("/prompts", methods=["GET"])
def get_prompts():
    """List prompts, most recently created first.
    ---
    tags:
      - Prompts
    parameters:
      - in: query
        name: format
        schema:
          type: string
        description: "array (default) or map (id -> prompt, same order)"
    responses:
      200:
        description: All prompts.
    """
    try:
        prompts = prompt_service.list_prompts()
        fmt = (request.args.get("format") or "array").lower()
        if fmt == "map":
            data = {p["id"]: p for p in prompts}
            # dict order is the list order; jsonify would sort the keys
            body = _json.dumps({"code": 0, "data": data}, ensure_ascii=False, sort_keys=False)
            return current_app.response_class(body, mimetype="application/json")
        return _ok(prompts)
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompts", methods=["POST"])
def create_prompt():
    """Create or replace a prompt.
    ---
    tags:
      - Prompts
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [id, name, content]
          example:
            id: "reviewer"
            name: "Code reviewer"
            content: "You review code carefully."
            description: "Strict review persona"
            enabled: false
    responses:
      201:
        description: The saved prompt.
      400:
        description: Invalid payload.
    """
    try:
        saved = prompt_service.upsert_prompt(_from_wire(request.get_json(silent=True)))
        return _ok(saved, 201)
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompts/<string:prompt_id>", methods=["GET"])
def get_prompt(prompt_id):
    """Get one prompt by id.
    ---
    tags:
      - Prompts
    parameters:
      - in: path
        name: prompt_id
        type: string
        required: true
    responses:
      200:
        description: The prompt.
      404:
        description: No prompt with this id.
    """
    try:
        return _ok(prompt_service.get_prompt(prompt_id))
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompts/<string:prompt_id>", methods=["PUT"])
def update_prompt(prompt_id):
    """Create or replace the prompt with the id from the path.
    ---
    tags:
      - Prompts
    parameters:
      - in: path
        name: prompt_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          required: [name, content]
          example:
            name: "Code reviewer"
            content: "You review code carefully."
            enabled: true
    responses:
      200:
        description: The saved prompt.
      400:
        description: Invalid payload.
    """
    payload = _from_wire(request.get_json(silent=True))
    try:
        if not isinstance(payload, dict):
            raise InvalidInputError("Request body must be a JSON object")
        payload["id"] = prompt_id
        return _ok(prompt_service.upsert_prompt(payload))
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompts/<string:prompt_id>", methods=["DELETE"])
def delete_prompt(prompt_id):
    """Delete a prompt. The enabled prompt cannot be deleted.
    ---
    tags:
      - Prompts
    responses:
      200:
        description: Deleted (or already absent).
      400:
        description: The prompt is currently enabled.
    """
    try:
        prompt_service.delete_prompt(prompt_id)
        return _ok({"id": prompt_id})
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompts/<string:prompt_id>/enable", methods=["POST"])
def enable_prompt(prompt_id):
    """Make a prompt the active one and write it to the prompt file.
    ---
    tags:
      - Prompts
    responses:
      200:
        description: The enabled prompt.
      404:
        description: No prompt with that id.
    """
    try:
        return _ok(prompt_service.enable_prompt(prompt_id))
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompt-file", methods=["GET"])
def get_prompt_file():
    """Current raw content of the prompt file (null when it does not exist)."""
    try:
        file_path = str(prompt_service.get_prompt_file().path)
        return _ok({"path": file_path, "content": prompt_service.get_current_file_content()})
    except Exception as e:
        return _error_response(e)


@prompts_bp.route("/prompt-file/import", methods=["POST"])
def import_prompt_file():
    """Store the prompt file's current content as a new disabled prompt.
    ---
    tags:
      - Prompts
    responses:
      201:
        description: Id of the imported prompt.
      404:
        description: The prompt file does not exist.
    """
    try:
        new_id = prompt_service.import_from_file()
        return _ok({"id": new_id}, 201)
    except Exception as e:
        return _error_response(e)


def _from_wire(payload):
    if not isinstance(payload, dict):
        return payload
    data = dict(payload)
    for alias, key in _WIRE_ALIASES.items():
        if alias in data:
            data.setdefault(key, data.pop(alias))
    return data


def _ok(data, status=200):
    return jsonify({"code": 0, "data": data}), status


def _err(msg, status=400):
    return jsonify({"code": 1, "error": str(msg)}), status


def _error_response(e):
    if isinstance(e, NotFoundError):
        return _err(e, 404)
    if isinstance(e, InvalidInputError):
        return _err(e, 400)
    if isinstance(e, PromptSwitchError):
        current_app.logger.error(f"Prompt operation failed: {e}")
        return _err(e, 500)
    db.session.rollback()
    current_app.logger.exception(e)
    return _err(e, 500)
