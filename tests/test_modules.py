"""Tests for axium.modules — manifests, activation and shortcuts."""

import json
import logging
from pathlib import Path

import pytest

from axium.app import App
from axium.config import AppConfig, DependencyOrder, RouterMode
from axium.errors import ConfigurationError, ManifestError
from axium.modules import Manifest, ModuleRef
from axium.testing import TestClient


def _app(modules_dir: Path, **config: object) -> App:
    return App(AppConfig(router_mode=RouterMode.JSON, module_path=modules_dir, **config))


def _paths(app: App) -> list[str]:
    return [route.path for route in app.routes]


class TestModuleRef:
    def test_parse(self) -> None:
        assert ModuleRef.parse("Users@1.0") == ModuleRef("Users", "1.0")
        assert str(ModuleRef("Users", "1.0")) == "Users@1.0"

    @pytest.mark.parametrize("text", ["Users", "@1.0", "Users@"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(ManifestError, match="Invalid module reference"):
            ModuleRef.parse(text)


class TestManifest:
    def test_load(self, make_module) -> None:
        folder = make_module("Users", dependencies=["auth@2.0"], manifest_extra={"routes": "r.py"})
        manifest = Manifest.load(folder)
        assert manifest.slug == "users"
        assert manifest.dependencies == (ModuleRef("auth", "2.0"),)
        assert manifest.routes == "r.py"
        assert manifest.shortcuts is None

    def test_missing_file(self, modules_dir: Path) -> None:
        (modules_dir / "Empty").mkdir()
        with pytest.raises(ManifestError, match="not found"):
            Manifest.load(modules_dir / "Empty")

    def test_invalid_json(self, modules_dir: Path) -> None:
        folder = modules_dir / "Broken"
        folder.mkdir()
        (folder / "manifest.json").write_text("{oops")
        with pytest.raises(ManifestError, match="Failed to decode"):
            Manifest.load(folder)

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"slug": "x", "version": "1.0"},
            {"uuid": "u", "slug": "x", "version": 1.0},
            {"uuid": "u", "slug": "x", "version": "1.0", "dependencies": "auth@1.0"},
            {"uuid": "u", "slug": "x", "version": "1.0", "routes": 3},
        ],
    )
    def test_structurally_invalid(self, tmp_path: Path, data: object) -> None:
        (tmp_path / "manifest.json").write_text(json.dumps(data))
        with pytest.raises(ManifestError):
            Manifest.load(tmp_path)


class TestActivation:
    def test_registers_routes(self, modules_dir: Path, make_module) -> None:
        make_module("Users")
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        assert _paths(app) == ["/users"]
        assert app.modules.is_active("uuid-users")

    async def test_module_routes_are_served(self, modules_dir: Path, make_module) -> None:
        make_module("Users")
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        async with TestClient(app) as client:
            response = await client.get("/users")
        assert response.text == "users"

    def test_duplicate_request_runs_route_file_once(self, modules_dir: Path, make_module) -> None:
        make_module("Users")
        app = _app(modules_dir)
        app.loader.activate(["Users@1.0", "Users@1.0"])
        app.loader.load_module("Users@1.0")
        assert _paths(app) == ["/users"]

    def test_diamond_dependency_activated_once(self, modules_dir: Path, make_module) -> None:
        make_module("Core")
        make_module("Left", dependencies=["Core@1.0"])
        make_module("Right", dependencies=["Core@1.0"])
        make_module("Top", dependencies=["Left@1.0", "Right@1.0"])
        app = _app(modules_dir)
        app.loader.load_module("Top@1.0")
        assert sorted(_paths(app)) == ["/core", "/left", "/right", "/top"]
        assert len(app.modules) == 4

    def test_version_mismatch_before_registration(self, modules_dir: Path, make_module) -> None:
        make_module("Users", version="2.0")
        app = _app(modules_dir)
        with pytest.raises(ManifestError, match=r"Required: 1\.0\. Installed: 2\.0"):
            app.loader.load_module("Users@1.0")
        assert len(app.routes) == 0
        assert len(app.modules) == 0

    def test_version_is_compared_exactly(self, modules_dir: Path, make_module) -> None:
        make_module("Users", version="1.0")
        app = _app(modules_dir)
        with pytest.raises(ManifestError):
            app.loader.load_module("Users@1.0.0")

    def test_already_active_module_skips_version_check(
        self, modules_dir: Path, make_module
    ) -> None:
        make_module("Users", version="1.0")
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        app.loader.load_module("Users@9.9")
        assert len(app.modules) == 1

    def test_missing_folder(self, modules_dir: Path) -> None:
        app = _app(modules_dir)
        with pytest.raises(ManifestError, match="Module folder 'Ghost' not found"):
            app.loader.load_module("Ghost@1.0")

    def test_module_without_route_file(self, modules_dir: Path, make_module) -> None:
        make_module("Library", routes=None)
        app = _app(modules_dir)
        app.loader.load_module("Library@1.0")
        assert app.modules.is_active("uuid-library")
        assert len(app.routes) == 0

    def test_route_file_without_register(self, modules_dir: Path, make_module) -> None:
        make_module("Bad", routes="ROUTES = []\n")
        app = _app(modules_dir)
        with pytest.raises(ManifestError, match="no register"):
            app.loader.load_module("Bad@1.0")

    def test_failing_register_leaves_no_routes(self, modules_dir: Path, make_module) -> None:
        make_module(
            "Flaky",
            routes="""
            def register(app):
                app.get("/flaky", lambda: "ok")
                if "Ready" not in app.capabilities:
                    raise RuntimeError("not ready")
                app.get("/flaky/{id}", lambda item_id: item_id)
            """,
        )
        app = _app(modules_dir)
        with pytest.raises(RuntimeError, match="not ready"):
            app.loader.load_module("Flaky@1.0")
        assert _paths(app) == []
        assert not app.modules.is_active("uuid-flaky")

        app.capability("Ready", object())
        app.loader.load_module("Flaky@1.0")
        assert _paths(app) == ["/flaky", "/flaky/{id}"]

    def test_bad_shortcuts_file_leaves_no_routes(self, modules_dir: Path, make_module) -> None:
        module = make_module("Users", shortcuts={})
        (module / "Routes" / "shortcuts.json").write_text("[1, 2]")
        app = _app(modules_dir)
        with pytest.raises(ManifestError, match="JSON object"):
            app.loader.load_module("Users@1.0")
        assert _paths(app) == []

    def test_manifest_routes_entry_point(self, modules_dir: Path, make_module) -> None:
        make_module(
            "Blog",
            routes_path="http/urls.py",
            manifest_extra={"routes": "HTTP/URLS.py"},
        )
        app = _app(modules_dir)
        app.loader.load_module("Blog@1.0")
        assert _paths(app) == ["/blog"]

    def test_missing_declared_route_file(self, modules_dir: Path, make_module) -> None:
        make_module("Blog", routes=None, manifest_extra={"routes": "nope.py"})
        app = _app(modules_dir)
        with pytest.raises(ManifestError, match="nope.py"):
            app.loader.load_module("Blog@1.0")


class TestCaseInsensitiveFolders:
    def test_folder_name_case(self, modules_dir: Path, make_module) -> None:
        make_module("UserAdmin", routes_path="routes/Routes.py")
        app = _app(modules_dir)
        app.loader.load_module("useradmin@1.0")
        assert _paths(app) == ["/useradmin"]

    def test_collision_warns_and_uses_first_sorted(
        self, modules_dir: Path, make_module, caplog: pytest.LogCaptureFixture
    ) -> None:
        make_module("users", uuid="lower", slug="lower")
        make_module("Users", uuid="upper", slug="upper")
        folders = sorted(p.name for p in modules_dir.iterdir())
        if len(folders) < 2:
            pytest.skip("case-insensitive filesystem")
        app = _app(modules_dir)
        with caplog.at_level(logging.WARNING, logger="axium.modules"):
            app.loader.load_module("USERS@1.0")
        assert "matches several folders" in caplog.text
        assert app.modules.is_active("upper")

    def test_collision_strict(self, modules_dir: Path, make_module) -> None:
        make_module("users", uuid="lower", slug="lower")
        make_module("Users", uuid="upper", slug="upper")
        if len(list(modules_dir.iterdir())) < 2:
            pytest.skip("case-insensitive filesystem")
        app = _app(modules_dir, strict_module_folders=True)
        with pytest.raises(ManifestError, match="several folders"):
            app.loader.load_module("users@1.0")


class TestDependencyOrder:
    def test_self_first(self, modules_dir: Path, make_module) -> None:
        make_module("Auth")
        make_module("Users", dependencies=["Auth@1.0"])
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        assert _paths(app) == ["/users", "/auth"]
        assert app.modules.uuids == ("uuid-users", "uuid-auth")

    def test_dependencies_first(self, modules_dir: Path, make_module) -> None:
        make_module("Auth")
        make_module("Users", dependencies=["Auth@1.0"])
        app = _app(modules_dir, dependency_order=DependencyOrder.DEPENDENCIES_FIRST)
        app.loader.load_module("Users@1.0")
        assert _paths(app) == ["/auth", "/users"]

    def test_cycle_terminates_self_first(self, modules_dir: Path, make_module) -> None:
        make_module("A", dependencies=["B@1.0"])
        make_module("B", dependencies=["A@1.0"])
        app = _app(modules_dir)
        app.loader.load_module("A@1.0")
        assert _paths(app) == ["/a", "/b"]

    def test_cycle_raises_dependencies_first(self, modules_dir: Path, make_module) -> None:
        make_module("A", dependencies=["B@1.0"])
        make_module("B", dependencies=["A@1.0"])
        app = _app(modules_dir, dependency_order=DependencyOrder.DEPENDENCIES_FIRST)
        with pytest.raises(ManifestError, match="Dependency cycle"):
            app.loader.load_module("A@1.0")
        assert len(app.routes) == 0


class TestActivationLists:
    def _write_ini(self, path: Path, essentials: list[str], active: list[str]) -> None:
        path.mkdir(exist_ok=True)
        (path / "system-ini.json").write_text(
            json.dumps({"Modules": {"essentials": essentials, "active": active}})
        )

    def test_essential_then_active(self, tmp_path: Path, modules_dir: Path, make_module) -> None:
        make_module("Core")
        make_module("Blog", dependencies=["Core@1.0"])
        ini = tmp_path / "config"
        self._write_ini(ini, ["Core@1.0"], ["Blog@1.0"])
        app = _app(modules_dir, ini_system_path=ini)
        app.loader.load_essential_modules()
        app.loader.load_active_modules()
        assert _paths(app) == ["/core", "/blog"]

    def test_missing_activation_file(self, tmp_path: Path, modules_dir: Path) -> None:
        app = _app(modules_dir, ini_system_path=tmp_path / "nowhere")
        with pytest.raises(ConfigurationError, match="Activation file not found"):
            app.loader.load_active_modules()

    def test_malformed_activation_list(self, tmp_path: Path, modules_dir: Path) -> None:
        (tmp_path / "system-ini.json").write_text(json.dumps({"Modules": {"active": "Blog@1.0"}}))
        app = _app(modules_dir, ini_system_path=tmp_path)
        with pytest.raises(ConfigurationError):
            app.loader.load_active_modules()


class TestShortcuts:
    def test_adjacent_shortcuts_file(self, modules_dir: Path, make_module) -> None:
        make_module("Users", shortcuts={"profile": "/users/{id}", "list": "/users"})
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        assert app.modules.shortcuts("users") == {"profile": "/users/{id}", "list": "/users"}
        assert app.modules.shortcut("users", "profile", id=42) == "/users/42"
        assert app.modules.shortcut("users", "list") == "/users"

    def test_declared_shortcuts_file(self, modules_dir: Path, make_module) -> None:
        folder = make_module("Users", manifest_extra={"shortcuts": "meta/links.json"})
        (folder / "meta").mkdir()
        (folder / "meta" / "links.json").write_text(json.dumps({"home": "/"}))
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        assert app.modules.shortcut("users", "home") == "/"

    def test_unknown_shortcut(self, modules_dir: Path, make_module) -> None:
        make_module("Users", shortcuts={"profile": "/users/{id}"})
        app = _app(modules_dir)
        app.loader.load_module("Users@1.0")
        with pytest.raises(KeyError):
            app.modules.shortcut("users", "missing")
        with pytest.raises(KeyError):
            app.modules.shortcut("users", "profile")

    def test_invalid_shortcuts_file(self, modules_dir: Path, make_module) -> None:
        folder = make_module("Users")
        (folder / "Routes" / "shortcuts.json").write_text("[1, 2]")
        app = _app(modules_dir)
        with pytest.raises(ManifestError, match="JSON object"):
            app.loader.load_module("Users@1.0")
