"""Tests for settings loading and the command-line interface."""

import json
import os
import sys
from pathlib import Path

import pytest
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pagewright_pkg.cli import build_parser, main
from pagewright_pkg.errors import ConfigurationError
from pagewright_pkg.renderer import OUTPUT_EXT_POLICIES
from pagewright_pkg.settings import PagewrightSettings


class TestPagewrightSettings:
    """Test cases for PagewrightSettings."""

    def test_defaults_without_config_file(self, temp_dir):
        settings = PagewrightSettings(temp_dir).load_settings()
        assert settings == PagewrightSettings.DEFAULT_SETTINGS
        assert settings['output_ext_policy'] == 'second_to_last'

    def test_load_yaml(self, temp_dir):
        Path(temp_dir, 'pagewright.yml').write_text("title: Blog\nbaseurl: /blog\npaginate: 3\n")
        loader = PagewrightSettings(temp_dir)
        settings = loader.load_settings()

        assert settings['title'] == 'Blog'
        assert settings['baseurl'] == '/blog'
        assert settings['paginate'] == 3
        assert settings['layouts_dir'] == '_layouts'
        assert loader.config_file_path.endswith('pagewright.yml')

    def test_load_json(self, temp_dir):
        Path(temp_dir, 'pagewright.json').write_text(json.dumps({'output_ext_policy': 'last'}))
        settings = PagewrightSettings(temp_dir).load_settings()
        assert settings['output_ext_policy'] == 'last'

    def test_yml_preferred_over_json(self, temp_dir):
        Path(temp_dir, 'pagewright.yml').write_text("title: From YAML\n")
        Path(temp_dir, 'pagewright.json').write_text(json.dumps({'title': 'From JSON'}))
        assert PagewrightSettings(temp_dir).load_settings()['title'] == 'From YAML'

    def test_invalid_policy(self, temp_dir):
        Path(temp_dir, 'pagewright.yml').write_text("output_ext_policy: middle\n")
        with pytest.raises(ConfigurationError, match='output_ext_policy'):
            PagewrightSettings(temp_dir).load_settings()

    def test_policies_follow_renderer(self, temp_dir):
        """Every renderer policy is accepted, and the CLI offers the same names."""
        assert PagewrightSettings.OUTPUT_EXT_POLICIES == tuple(OUTPUT_EXT_POLICIES)
        for policy in OUTPUT_EXT_POLICIES:
            PagewrightSettings(temp_dir).validate({**PagewrightSettings.DEFAULT_SETTINGS, 'output_ext_policy': policy})

        choices = next(a.choices for a in build_parser()._actions if a.dest == 'output_ext_policy')
        assert list(choices) == list(OUTPUT_EXT_POLICIES)

    def test_invalid_yaml(self, temp_dir):
        Path(temp_dir, 'pagewright.yml').write_text("title: [unclosed\n")
        with pytest.raises(ConfigurationError, match='Invalid YAML'):
            PagewrightSettings(temp_dir).load_settings()

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(ConfigurationError, match='not found'):
            PagewrightSettings(temp_dir).load_settings(os.path.join(temp_dir, 'nope.yml'))

    def test_merge_with_args(self, temp_dir):
        loader = PagewrightSettings(temp_dir)
        loader.load_settings()
        merged = loader.merge_with_args({'baseurl': '/docs', 'url': None})

        assert merged['baseurl'] == '/docs'
        assert merged['url'] is None
        assert loader.settings['baseurl'] == ''

    def test_merge_with_args_validates(self, temp_dir):
        loader = PagewrightSettings(temp_dir)
        with pytest.raises(ConfigurationError, match='paginate'):
            loader.merge_with_args({'paginate': 0})

    @pytest.mark.parametrize('file_format', ['yml', 'json'])
    def test_sample_config_loads(self, temp_dir, file_format):
        loader = PagewrightSettings(temp_dir)
        config_path = loader.create_sample_config(file_format)

        assert os.path.basename(config_path) == f'pagewright.{file_format}'
        settings = PagewrightSettings(temp_dir).load_settings()
        assert settings['title'] == 'My Site'
        assert settings['paginate'] == 5


class TestCli:
    """Test cases for the pagewright command."""

    def test_parser_maps_setting_names(self):
        args = build_parser().parse_args(['page.md', '--layouts', 'tpl', '--strict', '--verbose'])
        assert args.layouts_dir == 'tpl'
        assert args.strict_variables is True
        assert args.log_level == 'DEBUG'
        assert args.output_ext_policy is None

    def test_render_to_file(self, mock_source_dir, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        output = os.path.join(temp_dir, 'out', 'about.html')

        code = main([os.path.join(mock_source_dir, 'about.html'), '--source', mock_source_dir, '-o', output])

        assert code == 0
        assert Path(output).read_text() == '<html><nav>menu</nav><p>About</p></html>'

    def test_render_to_stdout(self, mock_source_dir, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        path = os.path.join(mock_source_dir, '_posts', '2024-01-02-hello.md')

        assert main([path, '--source', mock_source_dir]) == 0
        assert capsys.readouterr().out == '<html><article><h1>Hello</h1>\n</article></html>'

    def test_incremental_metadata_written(self, mock_source_dir, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        Path(temp_dir, 'pagewright.yml').write_text(f"source: {mock_source_dir}\nincremental: true\n")
        page = os.path.join(mock_source_dir, 'about.html')

        assert main([page, '-o', os.path.join(temp_dir, 'about.html')]) == 0

        metadata = yaml.safe_load(Path(mock_source_dir, '.pagewright-metadata').read_text())
        assert metadata[page]['deps'] == [os.path.join(mock_source_dir, '_layouts', 'default.html')]

    def test_missing_file(self, mock_source_dir, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        code = main([os.path.join(mock_source_dir, 'missing.md'), '--source', mock_source_dir])
        assert code == 1
        assert 'Error:' in capsys.readouterr().err

    def test_non_utf8_source_reports_error(self, mock_source_dir, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        path = Path(mock_source_dir, 'latin1.html')
        path.write_bytes("Café".encode('latin-1'))

        assert main([str(path), '--source', mock_source_dir]) == 1
        err = capsys.readouterr().err
        assert 'Error:' in err
        assert 'latin1.html' in err

    def test_bad_config_reports_error(self, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        Path(temp_dir, 'pagewright.yml').write_text("related_posts_limit: -1\n")
        assert main(['page.md']) == 1
        assert 'related_posts_limit' in capsys.readouterr().err

    def test_init(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        assert main(['--init', 'yml']) == 0
        assert os.path.exists(os.path.join(temp_dir, 'pagewright.yml'))

    def test_file_required(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        with pytest.raises(SystemExit):
            main([])
