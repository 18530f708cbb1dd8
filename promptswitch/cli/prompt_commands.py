import click
import json
from promptswitch.errors import PromptSwitchError
from promptswitch.seeds.seed_prompts import run as run_first_launch_import
from promptswitch.services import prompt_service


def init_prompt_commands(app):
    """Register prompt-related Flask CLI commands on the given app."""

    @app.cli.command('list-prompts')
    @click.option('--as-json', is_flag=True, default=False, help='Print the full records as JSON')
    def list_prompts(as_json):
        """List prompts, most recently created first. '*' marks the enabled one."""
        prompts = _call(prompt_service.list_prompts)
        if as_json:
            click.echo(json.dumps(prompts, ensure_ascii=False, indent=2))
            return
        for p in prompts:
            marker = '*' if p['enabled'] else ' '
            click.echo(f"{marker} {p['id']}\t{p['name']}")

    @app.cli.command('enable-prompt')
    @click.argument('prompt_id')
    def enable_prompt(prompt_id):
        """Make PROMPT_ID the active prompt and write it to the prompt file."""
        prompt = _call(prompt_service.enable_prompt, prompt_id)
        click.echo(f"Enabled {prompt['id']} -> {prompt_service.get_prompt_file().path}")

    @app.cli.command('delete-prompt')
    @click.argument('prompt_id')
    def delete_prompt(prompt_id):
        """Delete PROMPT_ID (refused while it is enabled)."""
        _call(prompt_service.delete_prompt, prompt_id)
        click.echo(f"Deleted {prompt_id}")

    @app.cli.command('import-prompt')
    def import_prompt():
        """Store the prompt file's current content as a new disabled prompt."""
        new_id = _call(prompt_service.import_from_file)
        click.echo(f"Imported {new_id}")

    @app.cli.command('show-prompt-file')
    def show_prompt_file():
        """Print the prompt file's current content."""
        content = _call(prompt_service.get_current_file_content)
        if content is None:
            raise click.ClickException(f"{prompt_service.get_prompt_file().path} does not exist")
        click.echo(content, nl=False)

    @app.cli.command('bootstrap-prompts')
    def bootstrap_prompts():
        """Import the prompt file as the enabled prompt if the store is empty."""
        res = _call(run_first_launch_import, app)
        click.echo(json.dumps(res))


def _call(func, *args):
    try:
        return func(*args)
    except PromptSwitchError as e:
        raise click.ClickException(str(e)) from e
