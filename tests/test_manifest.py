from __future__ import annotations

import json

import pytest

from mods_dev_server.core.errors import ConfigurationWarning, ManifestWarning
from mods_dev_server.server.context import ServerContext
from mods_dev_server.server.manifest import (
    MANIFEST_NAME,
    ManifestWatcher,
    parse_external_resources,
    watch_manifest,
)


def _write_manifest(root, payload) -> None:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    (root / MANIFEST_NAME).write_text(text, encoding="utf-8")


class _Watches:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, path, callback):
        self.calls.append((path, callback))


def test_parse_external_resources():
    assert parse_external_resources('{"externalResources": ["https://a.example"]}') == ["https://a.example"]
    assert parse_external_resources('{"name": "mod"}') == []
    assert parse_external_resources('{"externalResources": "https://a.example"}') == []
    assert parse_external_resources('{"externalResources": ["x", 1, null]}') == ["x"]


@pytest.mark.parametrize("text", ["{not json", "", "null", "[1, 2]"])
def test_parse_rejects_non_objects(text):
    with pytest.raises(ValueError):
        parse_external_resources(text)


def test_missing_manifest_warns_and_registers_nothing(tmp_path):
    ctx = ServerContext()
    watches = _Watches()
    with pytest.warns(ManifestWarning, match="Could not find a mod-manifest.json"):
        watcher = watch_manifest(tmp_path, ctx.set_external_resources, watches)
    assert watcher is None
    assert watches.calls == []
    assert ctx.external_resources == ()


def test_manifest_warning_is_a_configuration_warning():
    assert issubclass(ManifestWarning, ConfigurationWarning)
    assert issubclass(ConfigurationWarning, UserWarning)


def test_initial_read_and_watch_registration(tmp_path):
    _write_manifest(tmp_path, {"externalResources": ["https://example.com"]})
    ctx = ServerContext()
    watches = _Watches()

    watcher = watch_manifest(tmp_path, ctx.set_external_resources, watches)

    assert watcher is not None
    assert ctx.external_resources == ("https://example.com",)
    assert len(watches.calls) == 1
    path, callback = watches.calls[0]
    assert path == str(tmp_path / MANIFEST_NAME)
    assert callback == watcher.refresh


def test_change_replaces_resources(tmp_path):
    _write_manifest(tmp_path, {"externalResources": ["a", "b"]})
    ctx = ServerContext()
    watches = _Watches()
    watch_manifest(tmp_path, ctx.set_external_resources, watches)

    _write_manifest(tmp_path, {"externalResources": ["c"]})
    watches.calls[0][1]()
    assert ctx.external_resources == ("c",)

    _write_manifest(tmp_path, {"name": "no resources"})
    watches.calls[0][1]()
    assert ctx.external_resources == ()


def test_invalid_json_keeps_last_good_value(tmp_path):
    _write_manifest(tmp_path, {"externalResources": ["a"]})
    ctx = ServerContext()
    watches = _Watches()
    watch_manifest(tmp_path, ctx.set_external_resources, watches)

    _write_manifest(tmp_path, '{"externalResources": [')
    watches.calls[0][1]()
    assert ctx.external_resources == ("a",)


def test_invalid_initial_manifest_leaves_resources_empty(tmp_path):
    _write_manifest(tmp_path, "not json at all")
    ctx = ServerContext()
    watch_manifest(tmp_path, ctx.set_external_resources, _Watches())
    assert ctx.external_resources == ()


def test_deleted_manifest_keeps_last_good_value(tmp_path):
    _write_manifest(tmp_path, {"externalResources": ["a"]})
    watcher = ManifestWatcher(tmp_path / MANIFEST_NAME)
    watcher.refresh()
    (tmp_path / MANIFEST_NAME).unlink()
    assert watcher.refresh() == ("a",)


def test_subscribers_receive_previous_value_on_failure(tmp_path):
    _write_manifest(tmp_path, {"externalResources": ["a"]})
    seen = []
    watcher = ManifestWatcher(tmp_path / MANIFEST_NAME)
    watcher.subscribe(seen.append)

    watcher.refresh()
    _write_manifest(tmp_path, "{")
    watcher.refresh()

    assert seen == [("a",), ("a",)]


def test_verbose_reports_parse_failures(tmp_path, capsys):
    _write_manifest(tmp_path, "{")
    ManifestWatcher(tmp_path / MANIFEST_NAME, verbose=True).refresh()
    assert "Ignoring unreadable mod-manifest.json" in capsys.readouterr().err


def test_quiet_by_default(tmp_path, capsys):
    _write_manifest(tmp_path, "{")
    ManifestWatcher(tmp_path / MANIFEST_NAME).refresh()
    assert capsys.readouterr().err == ""
