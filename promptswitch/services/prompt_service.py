import time
from datetime import datetime
from typing import Optional

import structlog
from flask import current_app

from promptswitch.errors import ConfigError, FileIOError, InvalidInputError, NotFoundError
from promptswitch.services.prompt_file import PromptFile
from promptswitch.services.prompt_store import prompt_store

log = structlog.get_logger()

BACKUP_DESCRIPTION = "Auto-backup of original prompt"


def now_timestamp() -> int:
    return int(time.time())


def human_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M")


def get_prompt_file() -> PromptFile:
    """The external prompt file configured for the current app."""
    path = current_app.config.get("PROMPT_FILE_PATH")
    if not path:
        raise ConfigError("Cannot find home directory to locate the prompt file")
    return PromptFile(path)


def synthesize_id(prefix: str, timestamp: int) -> str:
    """Return ``<prefix>-<timestamp>``, suffixed with -2, -3... if that id is taken."""
    base = f"{prefix}-{timestamp}"
    candidate = base
    n = 2
    while prompt_store.get_prompt(candidate) is not None:
        candidate = f"{base}-{n}"
        n += 1
    return candidate


def _optional_timestamp(data: dict, key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"'{key}' must be an integer timestamp")
    return value


def _validate_prompt(data) -> dict:
    if not isinstance(data, dict):
        raise InvalidInputError("Prompt must be an object")

    prompt_id = data.get("id")
    if not isinstance(prompt_id, str) or not prompt_id.strip():
        raise InvalidInputError("'id' is required")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("'name' is required")
    content = data.get("content")
    if not isinstance(content, str):
        raise InvalidInputError("'content' must be a string")
    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise InvalidInputError("'description' must be a string")
    enabled = data.get("enabled", False)
    if not isinstance(enabled, bool):
        raise InvalidInputError("'enabled' must be a boolean")

    return {
        "id": prompt_id,
        "name": name,
        "content": content,
        "description": description,
        "enabled": enabled,
        "created_at": _optional_timestamp(data, "created_at"),
        "updated_at": _optional_timestamp(data, "updated_at"),
    }


def list_prompts() -> list[dict]:
    return prompt_store.list_prompts()


def get_prompt(prompt_id: str) -> dict:
    prompt = prompt_store.get_prompt(prompt_id)
    if prompt is None:
        raise NotFoundError(f"Prompt {prompt_id} not found")
    return prompt


def upsert_prompt(data: dict) -> dict:
    """Create or fully replace a prompt.

    An enabled payload never breaks the single-active rule: editing the
    active prompt rewrites the prompt file, and enabling any other prompt
    goes through ``enable_prompt`` so the file content is reconciled first.
    """
    prompt = _validate_prompt(data)
    existing = prompt_store.get_prompt(prompt["id"])

    now = now_timestamp()
    if prompt["created_at"] is None:
        prompt["created_at"] = existing["created_at"] if existing and existing["created_at"] else now
    prompt["updated_at"] = now

    if not prompt["enabled"]:
        prompt_store.save_prompt(prompt)
    elif existing is not None and existing["enabled"]:
        prompt_file = get_prompt_file()
        prompt_store.save_prompt(prompt)
        prompt_file.write(prompt["content"])
    else:
        prompt_store.save_prompt({**prompt, "enabled": False})
        enable_prompt(prompt["id"])

    log.info("prompt.upserted", prompt_id=prompt["id"], enabled=prompt["enabled"])
    return get_prompt(prompt["id"])


def delete_prompt(prompt_id: str) -> None:
    prompt = prompt_store.get_prompt(prompt_id)
    if prompt is not None and prompt["enabled"]:
        raise InvalidInputError("Cannot delete enabled prompt")

    prompt_store.delete_prompt(prompt_id)
    log.info("prompt.deleted", prompt_id=prompt_id, existed=prompt is not None)


def _capture_live_content(live_content: str) -> None:
    """Preserve what is currently in the prompt file before it is replaced.

    If a prompt is enabled it takes the file content (edits made directly
    in the file are kept). Otherwise the content is stored as a disabled
    backup prompt, unless some prompt already holds the same text.
    """
    # Read from the database: another process may have switched prompts
    current = prompt_store.get_enabled()
    if current is not None:
        # Copied down even when the text is unchanged
        current["content"] = live_content
        current["updated_at"] = now_timestamp()
        prompt_store.save_prompt(current)
        log.info("prompt.backfilled", prompt_id=current["id"])
        return

    stripped = live_content.strip()
    if any(content.strip() == stripped for content in prompt_store.list_contents()):
        return

    timestamp = now_timestamp()
    backup = {
        "id": synthesize_id("backup", timestamp),
        "name": f"Original Prompt {human_timestamp()}",
        "content": live_content,
        "description": BACKUP_DESCRIPTION,
        "enabled": False,
        "created_at": timestamp,
        "updated_at": timestamp,
    }
    prompt_store.save_prompt(backup)
    log.info("prompt.backup_created", prompt_id=backup["id"])


def enable_prompt(prompt_id: str) -> dict:
    """Make ``prompt_id`` the active prompt and mirror it into the prompt file.

    Steps:
      1. Read the prompt file; non-blank content is captured first
         (backfilled into the enabled prompt, or saved as a backup).
         A file that cannot be read is logged and left uncaptured.
      2. Disable every prompt.
      3. Look up the target. If it does not exist, NotFoundError is raised
         and the store is left with nothing enabled.
      4. Write the target's content to the prompt file, then enable it.
    """
    prompt_file = get_prompt_file()

    try:
        live_content = prompt_file.read()
    except FileIOError as e:
        log.warning("prompt.live_content_unreadable", path=e.path, error=str(e))
        live_content = None
    if live_content is not None and live_content.strip():
        _capture_live_content(live_content)

    prompt_store.disable_all()

    target = prompt_store.get_prompt(prompt_id)
    if target is None:
        raise NotFoundError(f"Prompt {prompt_id} not found")

    prompt_file.write(target["content"])
    prompt_store.set_active(prompt_id)
    log.info("prompt.enabled", prompt_id=prompt_id, path=str(prompt_file.path))

    target["enabled"] = True
    return target


def import_from_file() -> str:
    """Store the prompt file's current content as a new, disabled prompt."""
    prompt_file = get_prompt_file()
    content = prompt_file.read()
    if content is None:
        raise NotFoundError(f"{prompt_file.path.name} file not found")

    timestamp = now_timestamp()
    prompt = {
        "id": synthesize_id("imported", timestamp),
        "name": f"Imported Prompt {human_timestamp()}",
        "content": content,
        "description": f"Imported from existing {prompt_file.path.name}",
        "enabled": False,
        "created_at": timestamp,
        "updated_at": timestamp,
    }
    prompt_store.save_prompt(prompt)
    log.info("prompt.imported", prompt_id=prompt["id"], path=str(prompt_file.path))
    return prompt["id"]


def get_current_file_content() -> Optional[str]:
    return get_prompt_file().read()
