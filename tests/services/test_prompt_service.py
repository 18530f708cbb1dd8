import pytest

from promptswitch.errors import ConfigError, InvalidInputError, NotFoundError
from promptswitch.services import prompt_service
from promptswitch.services.prompt_service import BACKUP_DESCRIPTION
from promptswitch.services.prompt_store import prompt_store


def _enabled_ids():
    return [p['id'] for p in prompt_store.list_prompts() if p['enabled']]


class TestEnablePrompt:

    def test_enable_writes_file_and_marks_only_target(self, app, add_prompt, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha')
            add_prompt('b', 'Beta')

            result = prompt_service.enable_prompt('b')

            assert result['id'] == 'b'
            assert result['enabled'] is True
            assert prompt_path.read_text(encoding='utf-8') == 'Beta'
            assert _enabled_ids() == ['b']

    def test_sequence_of_activations_leaves_last_target_enabled(self, app, add_prompt, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha', created_at=1)
            add_prompt('b', 'Beta', created_at=2)
            add_prompt('c', 'Gamma', created_at=3)

            for target in ['a', 'c', 'b', 'b', 'a']:
                prompt_service.enable_prompt(target)
                assert _enabled_ids() == [target]

            assert prompt_path.read_text(encoding='utf-8') == 'Alpha'

    def test_creates_parent_directory_of_prompt_file(self, app, add_prompt, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha')
            assert not prompt_path.parent.exists()

            prompt_service.enable_prompt('a')

            assert prompt_path.exists()
            assert not prompt_path.with_name(prompt_path.name + '.tmp').exists()

    def test_drift_is_backfilled_into_enabled_prompt(self, app, add_prompt, write_prompt_file, prompt_path):
        """
        GIVEN prompt A is enabled with content "X" and prompt B holds "Z".
        WHEN the file is overwritten with "Y" and B is enabled.
        THEN A keeps "Y", A is disabled, B is enabled and the file holds "Z".
        """
        with app.app_context():
            add_prompt('a', 'X', enabled=True, updated_at=1000)
            add_prompt('b', 'Z')
            write_prompt_file('Y')

            prompt_service.enable_prompt('b')

            a = prompt_store.get_prompt('a')
            b = prompt_store.get_prompt('b')
            assert a['content'] == 'Y'
            assert a['enabled'] is False
            assert a['updated_at'] > 1000
            assert b['enabled'] is True
            assert prompt_path.read_text(encoding='utf-8') == 'Z'

    def test_backfill_happens_even_when_content_is_unchanged(self, app, add_prompt, write_prompt_file):
        with app.app_context():
            add_prompt('a', 'Same text', enabled=True, updated_at=1000)
            add_prompt('b', 'Other')
            write_prompt_file('Same text')

            prompt_service.enable_prompt('b')

            a = prompt_store.get_prompt('a')
            assert a['content'] == 'Same text'
            assert a['updated_at'] > 1000

    def test_backfill_keeps_untrimmed_file_content(self, app, add_prompt, write_prompt_file):
        with app.app_context():
            add_prompt('a', 'X', enabled=True)
            add_prompt('b', 'Z')
            write_prompt_file('  edited by hand\n\n')

            prompt_service.enable_prompt('b')

            assert prompt_store.get_prompt('a')['content'] == '  edited by hand\n\n'

    def test_unknown_content_without_enabled_prompt_creates_backup(self, app, add_prompt, write_prompt_file):
        with app.app_context():
            add_prompt('a', 'Alpha')
            write_prompt_file('Hand written\n')

            prompt_service.enable_prompt('a')

            backups = [p for p in prompt_store.list_prompts() if p['id'].startswith('backup-')]
            assert len(backups) == 1
            backup = backups[0]
            assert backup['content'] == 'Hand written\n'
            assert backup['enabled'] is False
            assert backup['description'] == BACKUP_DESCRIPTION
            assert backup['name'].startswith('Original Prompt ')
            assert backup['created_at'] == backup['updated_at']
            assert _enabled_ids() == ['a']

    def test_no_backup_when_content_already_stored(self, app, add_prompt, write_prompt_file):
        with app.app_context():
            add_prompt('a', 'Alpha')
            add_prompt('known', '  Known text  ')
            write_prompt_file('Known text\n')

            prompt_service.enable_prompt('a')

            ids = sorted(p['id'] for p in prompt_store.list_prompts())
            assert ids == ['a', 'known']

    @pytest.mark.parametrize('file_content', [None, '', '   \n\t'])
    def test_missing_or_blank_file_skips_reconciliation(self, app, add_prompt, write_prompt_file, file_content):
        with app.app_context():
            add_prompt('a', 'Alpha', enabled=True, updated_at=1000)
            add_prompt('b', 'Beta')
            if file_content is not None:
                write_prompt_file(file_content)

            prompt_service.enable_prompt('b')

            a = prompt_store.get_prompt('a')
            assert a['content'] == 'Alpha'
            assert a['updated_at'] == 1000
            assert len(prompt_store.list_prompts()) == 2

    def test_unreadable_file_is_overwritten_without_capture(self, app, add_prompt, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha', enabled=True, updated_at=1000)
            add_prompt('b', 'Beta')
            prompt_path.parent.mkdir(parents=True, exist_ok=True)
            prompt_path.write_bytes(b'\xff\xfe bad utf8')

            result = prompt_service.enable_prompt('b')

            assert result['id'] == 'b'
            assert prompt_path.read_text(encoding='utf-8') == 'Beta'
            a = prompt_store.get_prompt('a')
            assert a['content'] == 'Alpha'
            assert a['updated_at'] == 1000
            assert len(prompt_store.list_prompts()) == 2
            assert _enabled_ids() == ['b']

    def test_unknown_target_raises_and_leaves_nothing_enabled(self, app, add_prompt, write_prompt_file, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha', enabled=True)
            write_prompt_file('Alpha')

            with pytest.raises(NotFoundError) as excinfo:
                prompt_service.enable_prompt('missing')

            assert 'missing' in str(excinfo.value)
            assert isinstance(excinfo.value, InvalidInputError)
            assert _enabled_ids() == []
            assert prompt_path.read_text(encoding='utf-8') == 'Alpha'

    def test_missing_prompt_file_path_raises_config_error(self, app, add_prompt):
        with app.app_context():
            add_prompt('a', 'Alpha')
            app.config['PROMPT_FILE_PATH'] = None

            with pytest.raises(ConfigError):
                prompt_service.enable_prompt('a')


class TestDeletePrompt:

    def test_delete_enabled_prompt_is_refused(self, app, add_prompt):
        with app.app_context():
            add_prompt('a', 'Alpha', enabled=True)
            add_prompt('b', 'Beta')
            before = prompt_store.list_prompts()

            with pytest.raises(InvalidInputError):
                prompt_service.delete_prompt('a')

            assert prompt_store.list_prompts() == before

    def test_delete_disabled_prompt(self, app, add_prompt):
        with app.app_context():
            add_prompt('a', 'Alpha')

            prompt_service.delete_prompt('a')

            assert prompt_store.get_prompt('a') is None

    def test_delete_missing_prompt_is_noop(self, app):
        with app.app_context():
            prompt_service.delete_prompt('nope')
            assert prompt_store.list_prompts() == []


class TestImportFromFile:

    def test_import_creates_disabled_prompt_with_raw_content(self, app, write_prompt_file):
        with app.app_context():
            write_prompt_file('# Rules\r\n\r\nBe brief.  ')

            new_id = prompt_service.import_from_file()

            assert new_id.startswith('imported-')
            prompts = prompt_service.list_prompts()
            assert [p['id'] for p in prompts] == [new_id]
            imported = prompts[0]
            assert imported['content'] == '# Rules\r\n\r\nBe brief.  '
            assert imported['enabled'] is False
            assert imported['name'].startswith('Imported Prompt ')
            assert imported['description'] == 'Imported from existing AGENTS.md'

    def test_import_does_not_touch_enabled_prompt(self, app, add_prompt, write_prompt_file):
        with app.app_context():
            add_prompt('a', 'Alpha', enabled=True)
            write_prompt_file('Edited')

            prompt_service.import_from_file()

            assert prompt_store.get_prompt('a')['content'] == 'Alpha'
            assert _enabled_ids() == ['a']

    def test_import_twice_in_same_second_keeps_both(self, app, write_prompt_file, monkeypatch):
        with app.app_context():
            monkeypatch.setattr(prompt_service, 'now_timestamp', lambda: 1700000000)
            write_prompt_file('one')
            first = prompt_service.import_from_file()
            write_prompt_file('two')
            second = prompt_service.import_from_file()

            assert first == 'imported-1700000000'
            assert second == 'imported-1700000000-2'
            assert prompt_store.get_prompt(first)['content'] == 'one'
            assert prompt_store.get_prompt(second)['content'] == 'two'

    def test_import_missing_file_raises(self, app):
        with app.app_context():
            with pytest.raises(NotFoundError):
                prompt_service.import_from_file()


class TestUpsertPrompt:

    def test_upsert_new_disabled_prompt_sets_timestamps(self, app, monkeypatch):
        with app.app_context():
            monkeypatch.setattr(prompt_service, 'now_timestamp', lambda: 5000)

            saved = prompt_service.upsert_prompt({'id': 'p1', 'name': 'P1', 'content': 'text'})

            assert saved['enabled'] is False
            assert saved['created_at'] == 5000
            assert saved['updated_at'] == 5000

    def test_upsert_replaces_and_keeps_created_at(self, app, add_prompt, monkeypatch):
        with app.app_context():
            add_prompt('p1', 'old', created_at=100)
            monkeypatch.setattr(prompt_service, 'now_timestamp', lambda: 5000)

            saved = prompt_service.upsert_prompt(
                {'id': 'p1', 'name': 'Renamed', 'content': 'new', 'description': 'd'}
            )

            assert saved['name'] == 'Renamed'
            assert saved['content'] == 'new'
            assert saved['description'] == 'd'
            assert saved['created_at'] == 100
            assert saved['updated_at'] == 5000

    def test_editing_enabled_prompt_rewrites_file(self, app, add_prompt, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha')
            prompt_service.enable_prompt('a')

            prompt_service.upsert_prompt({'id': 'a', 'name': 'A', 'content': 'Alpha v2', 'enabled': True})

            assert prompt_path.read_text(encoding='utf-8') == 'Alpha v2'
            assert _enabled_ids() == ['a']

    def test_upsert_enabled_new_prompt_goes_through_activation(self, app, add_prompt, write_prompt_file, prompt_path):
        with app.app_context():
            add_prompt('a', 'Alpha', enabled=True)
            write_prompt_file('Alpha edited')

            prompt_service.upsert_prompt({'id': 'b', 'name': 'B', 'content': 'Beta', 'enabled': True})

            assert _enabled_ids() == ['b']
            assert prompt_store.get_prompt('a')['content'] == 'Alpha edited'
            assert prompt_path.read_text(encoding='utf-8') == 'Beta'

    @pytest.mark.parametrize('payload', [
        None,
        {'name': 'no id', 'content': 'x'},
        {'id': 'x', 'content': 'no name'},
        {'id': 'x', 'name': 'no content'},
        {'id': 'x', 'name': 'n', 'content': 'c', 'enabled': 'yes'},
        {'id': 'x', 'name': 'n', 'content': 'c', 'created_at': 'yesterday'},
    ])
    def test_upsert_rejects_invalid_payload(self, app, payload):
        with app.app_context():
            with pytest.raises(InvalidInputError):
                prompt_service.upsert_prompt(payload)
            assert prompt_store.list_prompts() == []


class TestCurrentFileContent:

    def test_returns_none_when_file_missing(self, app):
        with app.app_context():
            assert prompt_service.get_current_file_content() is None

    def test_returns_raw_content(self, app, write_prompt_file):
        with app.app_context():
            write_prompt_file('')
            assert prompt_service.get_current_file_content() == ''
            write_prompt_file(' raw \n')
            assert prompt_service.get_current_file_content() == ' raw \n'
