"""Unit tests for the lifecycle-script scanner (create_app.templates.lifecycle)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from create_app.errors import ManifestError
from create_app.templates.lifecycle import (
    RECOGNIZED_HOOKS,
    LifecycleWarning,
    TemplateManifest,
    find_lifecycle_hooks,
    load_manifest,
    scan_lifecycle_scripts,
)


def _write(template_dir: Path, content: str) -> Path:
    template_dir.mkdir(parents=True, exist_ok=True)
    path = template_dir / "package.json"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadManifest:
    @pytest.mark.unit
    def test_absent_manifest(self, tmp_path: Path):
        assert load_manifest(tmp_path) is None

    @pytest.mark.unit
    def test_parses_known_and_extra_fields(self, tmp_path: Path):
        _write(tmp_path, json.dumps({"name": "t", "scripts": {"dev": "vite"}, "private": True}))
        manifest = load_manifest(tmp_path)
        assert isinstance(manifest, TemplateManifest)
        assert manifest.name == "t"
        assert manifest.scripts == {"dev": "vite"}

    @pytest.mark.unit
    def test_invalid_json(self, tmp_path: Path):
        path = _write(tmp_path, '{"scripts": ')
        with pytest.raises(ManifestError) as exc_info:
            load_manifest(tmp_path)
        assert exc_info.value.path == path
        assert "invalid JSON" in exc_info.value.reason

    @pytest.mark.unit
    @pytest.mark.parametrize("content", ['["a", "b"]', '"just a string"', '{"scripts": ["postinstall"]}'])
    def test_wrong_shape(self, tmp_path: Path, content: str):
        _write(tmp_path, content)
        with pytest.raises(ManifestError, match="unexpected structure"):
            load_manifest(tmp_path)

    @pytest.mark.unit
    def test_undecodable_bytes(self, tmp_path: Path):
        (tmp_path / "package.json").write_bytes(b"\xff\xfe\x00{")
        with pytest.raises(ManifestError):
            load_manifest(tmp_path)

    @pytest.mark.unit
    def test_symlink_outside_template_not_read(self, tmp_path: Path):
        outside = tmp_path / "outside.json"
        outside.write_text('{"scripts": {"postinstall": "x"}}', encoding="utf-8")
        template = tmp_path / "template-evil"
        template.mkdir()
        (template / "package.json").symlink_to(outside)

        with pytest.raises(ManifestError, match="outside the template directory"):
            load_manifest(template)

    @pytest.mark.unit
    def test_dangling_symlink_rejected(self, tmp_path: Path):
        (tmp_path / "package.json").symlink_to(tmp_path / "gone.json")
        with pytest.raises(ManifestError, match="not a regular file"):
            load_manifest(tmp_path)

    @pytest.mark.unit
    def test_directory_manifest_rejected(self, tmp_path: Path):
        (tmp_path / "package.json").mkdir()
        with pytest.raises(ManifestError, match="not a regular file"):
            load_manifest(tmp_path)

    @pytest.mark.unit
    def test_custom_manifest_name(self, tmp_path: Path):
        (tmp_path / "template.json").write_text('{"scripts": {}}', encoding="utf-8")
        assert load_manifest(tmp_path, "template.json") is not None
        assert load_manifest(tmp_path) is None


class TestScan:
    @pytest.mark.unit
    def test_no_scripts(self, tmp_path: Path):
        _write(tmp_path, '{"name": "t"}')
        assert scan_lifecycle_scripts(tmp_path, "template-t") is None

    @pytest.mark.unit
    def test_only_harmless_scripts(self, tmp_path: Path):
        _write(tmp_path, '{"scripts": {"dev": "vite", "build": "vite build"}}')
        assert scan_lifecycle_scripts(tmp_path, "template-t") is None

    @pytest.mark.unit
    def test_all_hooks_in_canonical_order(self, tmp_path: Path):
        scripts = {hook: "echo" for hook in reversed(RECOGNIZED_HOOKS)}
        _write(tmp_path, json.dumps({"scripts": scripts}))
        warning = scan_lifecycle_scripts(tmp_path, "template-t")
        assert warning == LifecycleWarning(template="template-t", hooks=RECOGNIZED_HOOKS)

    @pytest.mark.unit
    def test_message(self, tmp_path: Path):
        _write(tmp_path, '{"scripts": {"postinstall": "node x.js", "prepare": "husky"}}')
        warning = scan_lifecycle_scripts(tmp_path, "template-redux")
        assert warning.message == (
            "Template 'template-redux' declares lifecycle scripts (postinstall, prepare). "
            "These will run during installation. Proceed with caution."
        )

    @pytest.mark.unit
    def test_unparseable_propagates(self, tmp_path: Path):
        _write(tmp_path, "not json")
        with pytest.raises(ManifestError):
            scan_lifecycle_scripts(tmp_path, "template-t")

    @pytest.mark.unit
    def test_find_hooks_with_custom_set(self):
        manifest = TemplateManifest(scripts={"postinstall": "x", "prestart": "y"})
        assert find_lifecycle_hooks(manifest, ("prestart",)) == ("prestart",)
        assert find_lifecycle_hooks(TemplateManifest()) == ()
