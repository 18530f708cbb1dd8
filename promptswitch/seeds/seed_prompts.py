import structlog

from promptswitch.errors import FileIOError
from promptswitch.services import prompt_service
from promptswitch.services.prompt_store import prompt_store

log = structlog.get_logger()

AUTO_IMPORT_DESCRIPTION = "Automatically imported on first launch"


def import_on_first_launch() -> int:
    """Seed an empty store from the existing prompt file.

    Only runs when there are no prompts at all. The file content becomes
    the enabled prompt directly: with nothing stored there is nothing to
    reconcile against. A file that cannot be read is logged and skipped so
    that startup is never blocked by it.

    Returns the number of prompts created (0 or 1).
    """
    if not prompt_store.is_empty():
        return 0

    prompt_file = prompt_service.get_prompt_file()
    try:
        content = prompt_file.read()
    except FileIOError as e:
        log.warning("prompt.auto_import_failed", path=e.path, error=str(e))
        return 0

    if content is None or not content.strip():
        return 0

    log.info("prompt.auto_import_started", path=str(prompt_file.path))

    timestamp = prompt_service.now_timestamp()
    prompt = {
        "id": prompt_service.synthesize_id("auto-imported", timestamp),
        "name": f"Auto-imported Prompt {prompt_service.human_timestamp()}",
        "content": content,
        "description": AUTO_IMPORT_DESCRIPTION,
        "enabled": True,
        "created_at": timestamp,
        "updated_at": timestamp,
    }
    prompt_store.save_prompt(prompt)
    log.info("prompt.auto_imported", prompt_id=prompt["id"])
    return 1


def run(app) -> dict:
    """Run the first-launch import inside ``app``'s context and summarize it."""
    with app.app_context():
        created = import_on_first_launch()
    return {"created": created}
