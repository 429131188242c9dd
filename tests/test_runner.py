"""Tests for runner.py — the headless single-command front-end."""

import json

from conni_cli.runner import run_command


class TestRunCommand:
    def test_success_prints_result(self, project_root, remote, capsys):
        remote.get_spaces.return_value = {
            "results": [{"key": "DOCS", "name": "D", "type": "global", "id": 1}]
        }
        code = run_command("list-spaces", project_root=project_root)
        out = capsys.readouterr()
        assert code == 0
        assert json.loads(out.out)[0]["key"] == "DOCS"
        assert out.err == ""

    def test_pool_cleared_after_success(self, project_root, remote):
        run_command("list-spaces", project_root=project_root)
        remote.close.assert_called_once_with()

    def test_pool_cleared_after_failure(self, project_root, remote, capsys):
        remote.get_content.side_effect = RuntimeError("socket closed")
        code = run_command("get-page", '{"pageId": "1"}', project_root=project_root)
        assert code == 1
        assert "ERROR: socket closed" in capsys.readouterr().err
        remote.close.assert_called_once_with()

    def test_missing_arguments(self, project_root, remote, capsys):
        code = run_command("create-page", '{"spaceKey": "DOCS"}', project_root=project_root)
        err = capsys.readouterr().err
        assert code == 1
        assert '"title"' in err and '"body"' in err
        remote.cls.from_options.assert_not_called()

    def test_invalid_json(self, project_root, remote, capsys):
        code = run_command("get-page", "{pageId:1}", project_root=project_root)
        assert code == 1
        assert "not valid JSON" in capsys.readouterr().err

    def test_profile_and_format_overrides(self, project_root, remote, capsys):
        remote.get_current_user.return_value = {"displayName": "QA"}
        code = run_command("test-connection", profile="staging", project_root=project_root)
        assert code == 0
        options = remote.cls.from_options.call_args.args[0]
        assert options["host"] == "https://staging.example.com/wiki"
        assert "Profile: staging" in capsys.readouterr().out

    def test_help_flag_needs_no_config(self, empty_root, capsys):
        code = run_command("get-page", flag="-h", project_root=empty_root)
        assert code == 0
        assert "- pageId (required)" in capsys.readouterr().out

    def test_missing_config_exits_two(self, empty_root, capsys):
        code = run_command("list-spaces", project_root=empty_root)
        err = capsys.readouterr().err
        assert code == 2
        assert err.startswith("ERROR: Config file not found")
        assert "conni-cli config" in err

    def test_unknown_command(self, project_root, remote, capsys):
        code = run_command("explode", project_root=project_root)
        assert code == 1
        assert "Unknown command: explode" in capsys.readouterr().err
        remote.cls.from_options.assert_not_called()
