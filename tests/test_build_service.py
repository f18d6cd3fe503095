"""
Tests for BuildService, GoToolchain and the workspace writer.
"""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from decktool.domain.binary import BinarySpec, BuildTarget, build_filename
from decktool.exit_codes import CommandFailedError, DependencyError, UnsupportedTargetError
from decktool.infra.go_toolchain import GoToolchain
from decktool.services.build_service import BuildService, check_support
from decktool.services.workspace_service import WorkspaceService

from conftest import drain

PORTABLE = BinarySpec("decksh", "github.com/ajstarks/decksh/cmd/decksh", "decksh",
                      wasm_support=True, wasi_support=True)
UI_APP = BinarySpec("ebdeck", "github.com/ajstarks/ebcanvas/ebdeck", "ebcanvas", requires_ui=True)
NATIVE_ONLY = BinarySpec("tool", "example.com/tool", "tool")


class TestCheckSupport:

    def test_ui_message(self):
        with pytest.raises(UnsupportedTargetError, match=r"WASM not supported \(requires UI/graphics\)"):
            check_support(UI_APP, BuildTarget.WASM)

    def test_platform_message(self):
        with pytest.raises(UnsupportedTargetError, match=r"WASI not supported \(requires platform support\)"):
            check_support(NATIVE_ONLY, BuildTarget.WASI)

    def test_supported(self):
        check_support(PORTABLE, BuildTarget.WASI)


class TestBuildBinary:

    def test_unsupported_starts_nothing(self, deck_config):
        toolchain = MagicMock(spec=GoToolchain)
        service = BuildService(deck_config, toolchain=toolchain)

        result = service.build_binary(UI_APP, BuildTarget.WASM)

        assert result.unsupported
        assert result.status == "skipped"
        assert result.error == "WASM not supported (requires UI/graphics)"
        toolchain.build.assert_not_called()
        assert not deck_config.dist_dir.exists()

    def test_success(self, deck_config):
        toolchain = MagicMock(spec=GoToolchain)
        service = BuildService(deck_config, toolchain=toolchain)

        result = service.build_binary(PORTABLE, BuildTarget.WASM)

        expected = (deck_config.dist_dir / "decksh-wasm.wasm").resolve()
        assert result.ok
        assert result.path == str(expected)
        assert deck_config.dist_dir.is_dir()
        toolchain.build.assert_called_once_with(
            PORTABLE.package,
            expected,
            cwd=deck_config.src_dir,
            env={"GOOS": "js", "GOARCH": "wasm"},
        )

    def test_relative_output_dir_becomes_absolute(self, deck_config, work_dir, monkeypatch):
        monkeypatch.chdir(work_dir)
        toolchain = MagicMock(spec=GoToolchain)
        service = BuildService(deck_config, toolchain=toolchain)

        result = service.build_binary(PORTABLE, BuildTarget.WASI, output_dir=Path("out"))

        assert Path(result.path).is_absolute()
        assert result.path == str((work_dir / "out" / "decksh-wasi.wasm").resolve())

    def test_failure_is_recorded(self, deck_config):
        toolchain = MagicMock(spec=GoToolchain)
        toolchain.build.side_effect = CommandFailedError("go build x failed: exit status 1")
        service = BuildService(deck_config, toolchain=toolchain)

        result = service.build_binary(PORTABLE, BuildTarget.NATIVE)

        assert result.status == "failed"
        assert result.error.startswith("build failed:")
        assert not result.unsupported


class TestBuildAll:

    def test_one_failure_does_not_stop_the_matrix(self, deck_config):
        deck_config.toolchain = [PORTABLE, UI_APP]

        def fake_build(package, output, cwd, env=None):
            if env == BuildTarget.WASM.build_env() and package == PORTABLE.package:
                raise CommandFailedError("go build failed: exit status 2")

        toolchain = MagicMock(spec=GoToolchain)
        toolchain.build.side_effect = fake_build
        service = BuildService(deck_config, toolchain=toolchain)

        messages, summary = drain(service.build_all())

        assert summary is service.last_result
        assert len(summary.results) == 6
        assert summary.succeeded == 3
        assert summary.failed == 1
        assert summary.skipped == 2
        assert toolchain.build.call_count == 4
        assert "Building decksh for wasm..." in messages
        assert "Building ebdeck for wasm..." not in messages
        assert f"✓ Built {build_filename('ebdeck', BuildTarget.NATIVE)}" in messages

    def test_target_subset(self, deck_config):
        deck_config.toolchain = [PORTABLE, UI_APP]
        service = BuildService(deck_config, toolchain=MagicMock(spec=GoToolchain))

        _, summary = drain(service.build_all([BuildTarget.NATIVE]))

        assert [r.target for r in summary.results] == [BuildTarget.NATIVE, BuildTarget.NATIVE]
        assert summary.to_dict() == {'succeeded': 2, 'failed': 0, 'skipped': 0}


class TestGoToolchain:

    @patch("decktool.utils.subprocess.run")
    def test_env_overlay_is_per_child(self, mock_run, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        monkeypatch.delenv("GOOS", raising=False)
        mock_run.return_value = MagicMock(returncode=0, stdout="")

        GoToolchain("go").build("example.com/tool", tmp_path / "tool-wasm.wasm", cwd=tmp_path,
                                env={"GOOS": "js", "GOARCH": "wasm"})

        args, kwargs = mock_run.call_args
        assert args[0] == ["go", "build", "-o", str(tmp_path / "tool-wasm.wasm"), "example.com/tool"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["env"]["GOOS"] == "js"
        assert kwargs["env"]["PATH"] == "/usr/bin"
        assert "GOOS" not in os.environ

    @patch("decktool.utils.subprocess.run")
    def test_failure_raises(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=1, stdout="")
        with pytest.raises(CommandFailedError, match="exit status 1"):
            GoToolchain("go").build("example.com/tool", tmp_path / "tool", cwd=tmp_path)

    @patch("decktool.utils.subprocess.run")
    def test_missing_source_cache_is_not_a_missing_tool(self, mock_run, tmp_path):
        missing = tmp_path / ".src"

        with pytest.raises(CommandFailedError, match="working directory .* does not exist") as exc:
            GoToolchain("go").build("example.com/tool", tmp_path / "tool", cwd=missing)

        assert not isinstance(exc.value, DependencyError)
        mock_run.assert_not_called()


class TestWorkspace:

    def test_render_without_base_module(self, deck_config):
        content = WorkspaceService(deck_config).render()
        assert "use ..\n" not in content
        assert content == (
            "go 1.25\n"
            "\n"
            "use ./deck\n"
            "use ./decksh\n"
            "use ./ebcanvas\n"
            "use ./giocanvas\n"
            "use ./giftsh\n"
            "use ./gift\n"
        )

    def test_base_dir_joins_when_it_is_a_module(self, deck_config, work_dir):
        (work_dir / "go.mod").write_text("module example.com/decks\n")

        members = WorkspaceService(deck_config).members()

        assert members[0] == ".."
        assert members[1:] == ["./deck", "./decksh", "./ebcanvas", "./giocanvas", "./giftsh", "./gift"]

    def test_go_mod_directory_is_not_a_module(self, deck_config, work_dir):
        (work_dir / "go.mod").mkdir()
        assert ".." not in WorkspaceService(deck_config).members()

    def test_write_overwrites(self, deck_config):
        service = WorkspaceService(deck_config)
        deck_config.src_dir.mkdir(parents=True)
        service.path.write_text("stale\n")

        path = service.write()

        assert path == deck_config.src_dir / "go.work"
        assert path.read_text() == service.render()

    def test_creates_source_cache(self, deck_config):
        assert not deck_config.src_dir.exists()
        WorkspaceService(deck_config).write()
        assert (deck_config.src_dir / "go.work").is_file()

    def test_go_version_and_custom_dir(self, deck_config, work_dir):
        deck_config.go_version = "1.24"
        deck_config.repos["deck"].directory = str(work_dir / "vendor" / "deck")

        content = WorkspaceService(deck_config).render()

        assert content.startswith("go 1.24\n")
        assert "use ../vendor/deck\n" in content
