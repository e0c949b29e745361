"""Tests for the individual install steps against a fake PATH and runner."""

import pytest

from zsh_installer.install_config import Plugin
from zsh_installer.lib.command import CommandError
from zsh_installer.steps import (
    ConfigurePluginsStep,
    DefaultShellStep,
    EnsureFrameworkStep,
    EnsurePackageManagerStep,
    EnsurePluginStep,
    EnsureShellStep,
    ReloadConfigStep,
)
from zsh_installer.steps import step_60_default_shell


def _exe(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)


class TestEnsurePackageManager:
    def test_linux_apt_present(self, state, make_bin, runner):
        make_bin("apt-get")
        result = EnsurePackageManagerStep().run(state)
        assert result.changed is False
        assert runner.calls == []
        assert state["execution"]["decisions"]["package_manager"]["name"] == "apt"

    def test_linux_without_apt_is_fatal(self, state, bin_dir, runner):
        with pytest.raises(RuntimeError, match="cannot be installed"):
            EnsurePackageManagerStep().run(state)

    def test_darwin_installs_homebrew_and_login_profile(self, state, bin_dir, home, runner):
        state["config"]["platform"] = "darwin"

        def fake_brew_install(argv, kwargs):
            if argv[0] == "/bin/bash":
                _exe(bin_dir / "brew")

        runner.on_call(fake_brew_install)
        result = EnsurePackageManagerStep().run(state)

        assert result.changed is True
        assert runner.commands[0][:2] == ["curl", "-fsSL"]
        assert "Homebrew/install" in runner.commands[0][2]
        assert runner.commands[1][:2] == ["/bin/bash", "-c"]
        assert runner.calls[1]["env"]["NONINTERACTIVE"] == "1"

        zprofile = (home / ".zprofile").read_text()
        assert zprofile == f'eval "$({bin_dir / "brew"} shellenv)"\n'

    def test_darwin_installer_without_binary_is_fatal(self, state, bin_dir, runner):
        state["config"]["platform"] = "darwin"
        with pytest.raises(RuntimeError, match="was not found"):
            EnsurePackageManagerStep().run(state)

    def test_installer_failure_propagates(self, state, bin_dir, runner):
        state["config"]["platform"] = "darwin"
        runner.fail_on("curl", 22)
        with pytest.raises(CommandError) as exc:
            EnsurePackageManagerStep().run(state)
        assert exc.value.returncode == 22


class TestEnsureShell:
    def test_all_tools_present(self, state, make_bin, runner):
        make_bin("apt-get", "zsh", "git", "curl")
        result = EnsureShellStep().run(state)
        assert result.changed is False
        assert runner.calls == []

    def test_installs_only_missing_packages(self, state, make_bin, bin_dir, runner):
        make_bin("apt-get", "git", "curl")

        def fake_apt(argv, kwargs):
            if argv[:2] == ["apt-get", "install"]:
                for pkg in argv[3:]:
                    _exe(bin_dir / pkg)

        runner.on_call(fake_apt)
        result = EnsureShellStep().run(state)

        assert result.changed is True
        assert runner.commands == [["apt-get", "update"], ["apt-get", "install", "-y", "zsh"]]
        assert state["execution"]["decisions"]["zsh_path"] == str(bin_dir / "zsh")

    def test_install_without_zsh_afterwards_is_fatal(self, state, make_bin, runner):
        make_bin("apt-get")
        with pytest.raises(RuntimeError, match="zsh is still not on PATH"):
            EnsureShellStep().run(state)

    def test_apt_failure_stops(self, state, make_bin, runner):
        make_bin("apt-get")
        runner.fail_on("apt-get", 100)
        with pytest.raises(CommandError):
            EnsureShellStep().run(state)
        assert runner.commands == [["apt-get", "update"]]


class TestEnsureFramework:
    def test_present(self, state, home, runner):
        (home / ".oh-my-zsh").mkdir()
        assert EnsureFrameworkStep().run(state).changed is False
        assert runner.calls == []

    def test_runs_unattended_installer(self, state, home, runner):
        def fake_omz(argv, kwargs):
            if argv[0] == "sh":
                (home / ".oh-my-zsh").mkdir()

        runner.on_call(fake_omz)
        result = EnsureFrameworkStep().run(state)

        assert result.changed is True
        assert "ohmyzsh" in runner.commands[0][2]
        sh = runner.commands[1]
        assert sh[0:2] == ["sh", "-c"]
        assert sh[3:] == ["", "--unattended"]
        env = runner.calls[1]["env"]
        assert env["ZSH"] == str(home / ".oh-my-zsh")
        assert env["RUNZSH"] == "no"
        assert env["CHSH"] == "no"

    def test_installer_that_creates_nothing_is_fatal(self, state, runner):
        with pytest.raises(RuntimeError, match="does not exist"):
            EnsureFrameworkStep().run(state)

    def test_dry_run(self, state, runner):
        state["config"]["dry_run"] = True
        assert EnsureFrameworkStep().run(state).changed is True
        assert runner.calls == []


class TestEnsurePlugin:
    PLUGIN = Plugin(name="zsh-autosuggestions", url="https://github.com/zsh-users/zsh-autosuggestions")

    def test_step_id_names_plugin(self):
        assert EnsurePluginStep(self.PLUGIN).step_id == "40_plugin_zsh-autosuggestions"

    def test_clones_into_custom_plugins(self, state, home, runner):
        result = EnsurePluginStep(self.PLUGIN).run(state)
        dest = home / ".oh-my-zsh" / "custom" / "plugins" / "zsh-autosuggestions"
        assert result.changed is True
        assert runner.commands == [["git", "clone", self.PLUGIN.url, str(dest)]]

    def test_present(self, state, home, runner):
        (home / ".oh-my-zsh" / "custom" / "plugins" / "zsh-autosuggestions").mkdir(parents=True)
        assert EnsurePluginStep(self.PLUGIN).run(state).changed is False
        assert runner.calls == []

    def test_clone_failure(self, state, runner):
        runner.fail_on("git", 128)
        with pytest.raises(CommandError):
            EnsurePluginStep(self.PLUGIN).run(state)


class TestConfigurePlugins:
    def test_updates_default_line(self, state, home):
        (home / ".zshrc").write_text("plugins=(git)\n")
        assert ConfigurePluginsStep().run(state).changed is True
        assert (home / ".zshrc").read_text() == "plugins=(git zsh-autosuggestions zsh-syntax-highlighting)\n"
        assert state["execution"]["decisions"]["plugins_line"] == "updated"

    def test_missing_line_is_not_fatal(self, state, home):
        (home / ".zshrc").write_text("alias g=git\n")
        result = ConfigurePluginsStep().run(state)
        assert result.changed is False
        assert "by hand" in result.detail
        assert (home / ".zshrc").read_text() == "alias g=git\n"


class TestDefaultShell:
    def test_disabled_by_default(self, state, make_bin, runner):
        make_bin("zsh")
        result = DefaultShellStep().run(state)
        assert result.changed is False
        assert runner.calls == []

    def test_registers_and_changes_shell(self, state, make_bin, bin_dir, runner, monkeypatch, tmp_path):
        make_bin("zsh")
        monkeypatch.setattr(step_60_default_shell, "current_login_shell", lambda: "/bin/bash")
        state["config"]["make_default_shell"] = True

        result = DefaultShellStep().run(state)

        zsh = str(bin_dir / "zsh")
        assert result.changed is True
        assert runner.commands == [["tee", "-a", str(tmp_path / "shells")], ["chsh", "-s", zsh]]
        assert runner.calls[0]["input"] == zsh + "\n"

    def test_registered_shell_only_changes(self, state, make_bin, bin_dir, runner, monkeypatch, tmp_path):
        make_bin("zsh")
        (tmp_path / "shells").write_text(f"/bin/bash\n{bin_dir / 'zsh'}\n")
        monkeypatch.setattr(step_60_default_shell, "current_login_shell", lambda: "/bin/bash")
        state["config"]["make_default_shell"] = True

        DefaultShellStep().run(state)
        assert runner.programs == ["chsh"]

    def test_already_login_shell(self, state, make_bin, bin_dir, runner, monkeypatch):
        make_bin("zsh")
        monkeypatch.setattr(step_60_default_shell, "current_login_shell", lambda: str(bin_dir / "zsh"))
        state["config"]["make_default_shell"] = True

        assert DefaultShellStep().run(state).changed is False
        assert runner.calls == []

    def test_zsh_not_found_is_a_diagnostic(self, state, bin_dir, runner, caplog):
        state["config"]["make_default_shell"] = True
        result = DefaultShellStep().run(state)
        assert result.changed is False
        assert runner.calls == []
        assert "zsh binary not found" in caplog.text

    def test_chsh_failure_propagates(self, state, make_bin, runner, monkeypatch):
        make_bin("zsh")
        monkeypatch.setattr(step_60_default_shell, "current_login_shell", lambda: "/bin/bash")
        runner.fail_on("chsh")
        state["config"]["make_default_shell"] = True
        with pytest.raises(CommandError):
            DefaultShellStep().run(state)


class TestReloadConfig:
    def test_sources_rc_file(self, state, home, make_bin, bin_dir, runner):
        make_bin("zsh")
        (home / ".zshrc").write_text("plugins=(git)\n")
        ReloadConfigStep().run(state)
        assert runner.commands == [[str(bin_dir / "zsh"), "-c", f"source {home / '.zshrc'}"]]
        assert runner.calls[0]["env"]["HOME"] == str(home)

    def test_broken_rc_file_fails(self, state, home, make_bin, runner):
        make_bin("zsh")
        (home / ".zshrc").write_text("source /nonexistent\n")
        runner.fail_on("zsh", 1)
        with pytest.raises(CommandError):
            ReloadConfigStep().run(state)

    def test_skipped_without_rc_file(self, state, make_bin, runner):
        make_bin("zsh")
        assert ReloadConfigStep().run(state).changed is False
        assert runner.calls == []

    def test_disabled(self, state, home, make_bin, runner):
        make_bin("zsh")
        (home / ".zshrc").write_text("\n")
        state["config"]["reload_config"] = False
        ReloadConfigStep().run(state)
        assert runner.calls == []
