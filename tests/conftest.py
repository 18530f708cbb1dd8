from pathlib import Path

import pytest
from promptswitch import create_app, db
from promptswitch.services.prompt_store import prompt_store


@pytest.fixture(scope='function')
def app(tmp_path):
    """
    Fixture that creates a test app instance with a new database and a
    prompt file path inside the test's temporary directory.
    """
    app = create_app('testing')
    app.config['PROMPT_FILE_PATH'] = str(tmp_path / 'opencode' / 'AGENTS.md')

    with app.app_context():
        db.create_all()

        yield app

        # Teardown: drop all tables after tests are done
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def prompt_path(app) -> Path:
    """Path of the external prompt file (not created yet)."""
    return Path(app.config['PROMPT_FILE_PATH'])


@pytest.fixture
def write_prompt_file(prompt_path):
    """Simulate an edit made to the prompt file outside the app."""
    def _write(content: str) -> Path:
        prompt_path.parent.mkdir(parents=True, exist_ok=True)
        prompt_path.write_text(content, encoding='utf-8')
        return prompt_path
    return _write


@pytest.fixture
def add_prompt(app):
    """Store a prompt record directly, bypassing the service layer."""
    def _add(prompt_id, content, enabled=False, created_at=1000, **extra):
        record = {
            'id': prompt_id,
            'name': extra.pop('name', prompt_id.title()),
            'content': content,
            'description': extra.pop('description', None),
            'enabled': enabled,
            'created_at': created_at,
            'updated_at': extra.pop('updated_at', created_at),
        }
        prompt_store.save_prompt(record)
        return record
    return _add
