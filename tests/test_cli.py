"""Tests for the create-app flow."""
import pytest

from codepush_demo import cli
from codepush_demo.codepush import DeploymentKeys
from codepush_demo.errors import CodePushError, LinkError

KEYS = DeploymentKeys(android="a-key", ios="i-key")


class FlowRecorder:
    """Replaces each step of the flow with a stub that records its name."""

    def __init__(self, monkeypatch):
        self.steps = []
        self.keys_linked = None
        self.monkeypatch = monkeypatch
        monkeypatch.setattr(cli, "missing_tools", lambda: [])
        monkeypatch.setattr(cli, "is_windows", lambda: False)
        monkeypatch.setattr(cli, "resolve_version", self.record("resolve_version", lambda p: f"{p}@1.0.0"))
        monkeypatch.setattr(cli, "fetch_deployment_keys", self.record("fetch_deployment_keys", lambda n: KEYS))
        monkeypatch.setattr(cli, "generate_react_native_app", self.record("generate_react_native_app"))
        monkeypatch.setattr(cli, "install_codepush", self.record("install_codepush"))
        monkeypatch.setattr(cli, "link_codepush", self.record("link_codepush", self.link))
        monkeypatch.setattr(cli, "setup_assets", self.record("setup_assets", lambda *a, **k: True))
        monkeypatch.setattr(cli, "optimize_for_debug", self.record("optimize_for_debug"))
        monkeypatch.setattr(cli, "grant_access", self.record("grant_access"))

    def record(self, name, result=None):
        def step(*args, **kwargs):
            self.steps.append(name)
            if result is not None:
                return result(*args, **kwargs)
        return step

    def link(self, keys, cwd=None, timeout=None):
        self.keys_linked = keys

    def replace(self, name, func):
        self.monkeypatch.setattr(cli, name, self.record(name, func))


@pytest.fixture
def flow(monkeypatch):
    return FlowRecorder(monkeypatch)


def run(tmp_path, *argv):
    args = cli.build_parser().parse_args(list(argv))
    return cli.create_app(args, tmp_path)


def test_full_flow_order(flow, tmp_path):
    """Test steps run in order with patches between assets and permissions."""
    assert run(tmp_path, "MyDemo", "react-native@0.44.0", "react-native-code-push@5.0.0") == 0
    assert flow.steps == [
        "fetch_deployment_keys",
        "generate_react_native_app",
        "install_codepush",
        "link_codepush",
        "setup_assets",
        "optimize_for_debug",
        "grant_access",
    ]
    assert flow.keys_linked == KEYS


def test_existing_directory_stops_before_anything(flow, tmp_path, capsys):
    """Test an existing target directory is reported and nothing runs."""
    (tmp_path / "MyDemo").mkdir()
    assert run(tmp_path, "MyDemo") == 1
    assert flow.steps == []
    assert 'Folder with name "MyDemo" already exists' in capsys.readouterr().err


def test_default_app_name_and_latest_versions(flow, tmp_path, capsys):
    """Test missing arguments fall back to the default name and latest releases."""
    assert run(tmp_path) == 0
    assert flow.steps[:2] == ["resolve_version", "resolve_version"]
    out = capsys.readouterr().out
    assert "App name: CodePushDemoAppTest" in out
    assert "React Native version: react-native@1.0.0" in out
    assert "react-native-code-push@1.0.0" in out


def test_windows_skips_patches_and_permissions(flow, tmp_path):
    """Test no patch or permission commands run on Windows."""
    flow.monkeypatch.setattr(cli, "is_windows", lambda: True)
    assert run(tmp_path, "MyDemo", "react-native@0.44.0", "react-native-code-push@5.0.0") == 0
    assert "optimize_for_debug" not in flow.steps
    assert "grant_access" not in flow.steps
    assert flow.steps[-1] == "setup_assets"


def test_skip_debug_patch_keeps_permission_fix(flow, tmp_path):
    """Test --skip-debug-patch only drops the native patches."""
    assert run(tmp_path, "MyDemo", "rn@1", "cp@1", "--skip-debug-patch") == 0
    assert "optimize_for_debug" not in flow.steps
    assert flow.steps[-1] == "grant_access"


def test_link_failure_skips_assets(flow, tmp_path, capsys):
    """Test assets are not touched when linking never sees its prompts."""
    def fail(keys, cwd=None, timeout=None):
        raise LinkError("finished without asking")

    flow.replace("link_codepush", fail)
    assert run(tmp_path, "MyDemo", "rn@1", "cp@1") == 1
    assert "setup_assets" not in flow.steps
    assert flow.steps[-1] == "link_codepush"
    assert "Linking failed" in capsys.readouterr().err


def test_asset_failure_stops_before_patches(flow, tmp_path):
    """Test a failed app name substitution ends the run without patching."""
    flow.replace("setup_assets", lambda *a, **k: False)
    assert run(tmp_path, "MyDemo", "rn@1", "cp@1") == 1
    assert flow.steps[-1] == "setup_assets"


def test_link_timeout_and_fixtures_options(flow, tmp_path):
    """Test command-line options reach the link and asset steps."""
    seen = {}

    def link(keys, cwd=None, timeout=None):
        seen["timeout"] = timeout
        seen["cwd"] = cwd

    def assets(project_dir, fixture_dir, app_name):
        seen["fixtures"] = fixture_dir
        return True

    flow.replace("link_codepush", link)
    flow.replace("setup_assets", assets)
    assert run(tmp_path, "MyDemo", "rn@1", "cp@1", "--link-timeout", "12", "--fixtures", "fx") == 0
    assert seen["timeout"] == 12.0
    assert seen["cwd"] == tmp_path / "MyDemo"
    assert seen["fixtures"] == (tmp_path / "fx").resolve()


def test_missing_tools_reported(flow, tmp_path, capsys):
    """Test missing CLIs are listed with install hints."""
    flow.monkeypatch.setattr(cli, "missing_tools", lambda: ["code-push"])
    assert run(tmp_path, "MyDemo") == 1
    assert flow.steps == []
    assert "code-push register" in capsys.readouterr().err


def test_main_reports_codepush_errors(flow, tmp_path, monkeypatch, capsys):
    """Test main turns tool errors into an exit code."""
    def fail(name):
        raise CodePushError("You are not currently logged in")

    flow.replace("fetch_deployment_keys", fail)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli.signal, "signal", lambda *a: None)
    monkeypatch.setattr(cli.atexit, "register", lambda f: f)
    assert cli.main(["MyDemo", "rn@1", "cp@1"]) == 1
    assert "not currently logged in" in capsys.readouterr().err


def test_interrupt_exits_with_one(monkeypatch):
    """Test the signal handler cleans up children and exits with code 1."""
    seen = []
    monkeypatch.setattr(cli, "cleanup_processes", lambda: seen.append("cleanup"))
    monkeypatch.setattr(cli.os, "_exit", lambda code: seen.append(code))
    cli.signal_handler(2, None)
    assert seen == ["cleanup", 1]
