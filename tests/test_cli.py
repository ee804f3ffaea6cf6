"""Tests for CLI interface."""

import os
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from gitlab_github_migrate.api.exceptions import ConfigurationError
from gitlab_github_migrate.cli.main import _load_config, _mask, cli, init
from gitlab_github_migrate.config.config import Config
from gitlab_github_migrate.migration.orchestrator import BatchResult, MigrationSummary


def make_config():
    return Config(
        source={
            'url': 'https://gitlab.example.com',
            'token': 'gl-secret-1111',
            'project_id': 42,
        },
        destination={'owner': 'acme', 'repo': 'widgets', 'token': 'gh-secret-2222'},
    )


def make_summary(failed=0, fetch_error=None):
    return MigrationSummary(
        started_at=datetime(2024, 1, 1, 12, 0),
        completed_at=datetime(2024, 1, 1, 12, 5),
        batches=[
            BatchResult(
                entity_kind='Labels',
                total=3,
                successful=3 - failed,
                failed=failed,
                failed_items=[f'label-{i}' for i in range(failed)],
            ),
            BatchResult(entity_kind='Issues', fetch_error=fetch_error),
        ],
    )


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_cli_help(self):
        """Test CLI help command."""
        result = self.runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert 'GitLab to GitHub Migration Tool' in result.output
        assert 'init' in result.output
        assert 'migrate' in result.output
        assert 'validate' in result.output
        assert 'status' in result.output

    def test_cli_version(self):
        """Test CLI version command."""
        result = self.runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_init_command(self, tmp_path):
        """Test init command."""
        config_path = tmp_path / 'test_config.yaml'

        result = self.runner.invoke(init, ['--output', str(config_path)])

        assert result.exit_code == 0
        assert 'Configuration template created' in result.output
        content = config_path.read_text()
        assert 'source:' in content
        assert 'destination:' in content
        assert 'migration:' in content

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main._run_migration')
    def test_migrate_command_success(self, mock_run_migration, mock_load_config):
        """Test a clean migration exits 0."""
        mock_load_config.return_value = make_config()
        mock_run_migration.return_value = make_summary()

        result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 0
        assert 'Migration completed successfully' in result.output
        assert 'Migration Summary' in result.output
        mock_run_migration.assert_called_once()

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main._run_migration')
    def test_migrate_command_dry_run(self, mock_run_migration, mock_load_config):
        """Test --dry-run reaches the configuration."""
        mock_load_config.return_value = make_config()
        mock_run_migration.return_value = make_summary()

        result = self.runner.invoke(cli, ['migrate', '--dry-run'])

        assert result.exit_code == 0
        assert 'dry-run mode' in result.output
        config = mock_run_migration.call_args[0][0]
        assert config.migration.dry_run is True

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main._run_migration')
    def test_migrate_item_failures_exit_partial(self, mock_run_migration, mock_load_config):
        """Test failed items give a distinct exit code and are listed."""
        mock_load_config.return_value = make_config()
        mock_run_migration.return_value = make_summary(failed=2)

        result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 2
        assert '2 failed item(s)' in result.output
        assert 'Label: label-1' in result.output

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main._run_migration')
    def test_migrate_fetch_error_exit_partial(self, mock_run_migration, mock_load_config):
        """Test an unreadable batch also counts as a failed run."""
        mock_load_config.return_value = make_config()
        mock_run_migration.return_value = make_summary(fetch_error='gitlab down')

        result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 2
        assert 'fetch failed' in result.output

    @patch('gitlab_github_migrate.cli.main._load_config')
    def test_migrate_command_config_error(self, mock_load_config):
        """Test a configuration problem exits 1."""
        mock_load_config.side_effect = ConfigurationError('Invalid configuration')

        result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 1
        assert 'Migration failed' in result.output

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main._run_migration')
    def test_bare_invocation_runs_migration(self, mock_run_migration, mock_load_config):
        """Test running without a subcommand migrates."""
        mock_load_config.return_value = make_config()
        mock_run_migration.return_value = make_summary()

        result = self.runner.invoke(cli, [])

        assert result.exit_code == 0
        mock_run_migration.assert_called_once()

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main.MigrationEngine')
    def test_validate_command_success(self, mock_engine_class, mock_load_config):
        """Test validate with reachable services."""
        mock_load_config.return_value = make_config()

        result = self.runner.invoke(cli, ['validate'])

        assert result.exit_code == 0
        assert 'Connectivity validation passed' in result.output
        mock_engine_class.return_value.test_connectivity.assert_called_once()
        mock_engine_class.return_value.close.assert_called_once()

    @patch('gitlab_github_migrate.cli.main._load_config')
    @patch('gitlab_github_migrate.cli.main.MigrationEngine')
    def test_validate_command_failure(self, mock_engine_class, mock_load_config):
        """Test validate with an unreachable service."""
        mock_load_config.return_value = make_config()
        mock_engine_class.return_value.test_connectivity.side_effect = ConnectionError(
            'Cannot connect to destination GitHub API'
        )

        result = self.runner.invoke(cli, ['validate'])

        assert result.exit_code == 1
        assert 'Validation failed' in result.output
        mock_engine_class.return_value.close.assert_called_once()

    @patch('gitlab_github_migrate.cli.main._load_config')
    def test_status_command_masks_tokens(self, mock_load_config):
        """Test status shows the configuration without secrets."""
        mock_load_config.return_value = make_config()

        result = self.runner.invoke(cli, ['status'])

        assert result.exit_code == 0
        assert 'acme/widgets' in result.output
        assert '********1111' in result.output
        assert '********2222' in result.output
        assert 'gl-secret' not in result.output
        assert 'gh-secret' not in result.output

    @patch('gitlab_github_migrate.cli.main._load_config')
    def test_status_command_failure(self, mock_load_config):
        """Test status with a broken configuration."""
        mock_load_config.side_effect = FileNotFoundError('Configuration file not found')

        result = self.runner.invoke(cli, ['status'])

        assert result.exit_code == 1
        assert 'Failed to load status' in result.output

    def test_mask_short_token(self):
        """Test very short secrets are fully hidden."""
        assert _mask('abcd') == '****'


class TestConfigLoading:
    """Test configuration loading functions."""

    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for name in list(os.environ):
            if name.startswith(('GITLAB_', 'GITHUB_', 'MIGRATION_', 'LOG_')):
                monkeypatch.delenv(name)
        with patch('gitlab_github_migrate.config.config.load_dotenv'):
            yield

    @patch('gitlab_github_migrate.config.config.Config.from_file')
    def test_load_config_with_file(self, mock_from_file, tmp_path):
        """Test loading config from specified file."""
        config_file = tmp_path / 'custom.yaml'
        config_file.write_text('source: {}\n')
        mock_ctx = Mock()
        mock_ctx.obj = {'config_path': str(config_file)}

        config = _load_config(mock_ctx)

        assert config == mock_from_file.return_value
        mock_from_file.assert_called_once_with(str(config_file))

    @patch('gitlab_github_migrate.config.config.Config.from_file')
    def test_load_config_default_locations(self, mock_from_file, tmp_path):
        """Test the first default file found is used."""
        (tmp_path / 'config.yml').write_text('source: {}\n')
        (tmp_path / '.gitlab-github-migrate.yaml').write_text('source: {}\n')
        mock_ctx = Mock()
        mock_ctx.obj = {}

        _load_config(mock_ctx)

        mock_from_file.assert_called_once_with('config.yml')

    @patch('gitlab_github_migrate.config.config.Config.from_env')
    def test_load_config_from_env(self, mock_from_env):
        """Test loading config from environment variables."""
        mock_ctx = Mock()
        mock_ctx.obj = {}

        config = _load_config(mock_ctx)

        assert config == mock_from_env.return_value
        mock_from_env.assert_called_once()

    def test_load_config_missing_file(self, tmp_path):
        """Test an explicit path that vanished."""
        mock_ctx = Mock()
        mock_ctx.obj = {'config_path': str(tmp_path / 'gone.yaml')}

        with pytest.raises(FileNotFoundError):
            _load_config(mock_ctx)

    def test_load_config_not_found(self):
        """Test no file and no environment gives a configuration error."""
        mock_ctx = Mock()
        mock_ctx.obj = {}

        with pytest.raises(ConfigurationError, match='Invalid configuration'):
            _load_config(mock_ctx)
