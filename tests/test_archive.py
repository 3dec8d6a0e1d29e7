from __future__ import annotations

import json
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path

import pytest

from vset.errors import ManifestSchemaError, MissingContextError
from vset.package import build_package
from vset.package.archive import (
    CONTENT_TYPES_FILENAME,
    CONTENT_TYPES_NAMESPACE,
    VSIX_MANIFEST_FILENAME,
    VSO_MANIFEST_ASSET_TYPE,
    VSO_MANIFEST_FILENAME,
    VsixWriter,
    content_types_document,
    default_vsix_name,
    resolve_output_path,
)
from vset.package.merge import merge_partials
from vset.settings import PackageSettings


def _asset_entries(vsix_manifest: dict) -> list:
    return vsix_manifest["PackageManifest"]["Assets"][0]["Asset"]


def _content_types(archive: zipfile.ZipFile) -> tuple:
    root = ET.fromstring(archive.read(CONTENT_TYPES_FILENAME))
    defaults = root.findall(f"{{{CONTENT_TYPES_NAMESPACE}}}Default")
    return {node.get("Extension"): node.get("ContentType") for node in defaults}, len(defaults)


def test_write_vsix_contains_assets_manifests_and_content_types(
    tmp_path: Path, write_manifest, write_asset
) -> None:
    root = tmp_path / "ext"
    write_asset(root / "sub" / "img" / "a.png", b"\x89PNG")
    write_asset(root / "sub" / "data.json", b"{}")
    write_asset(root / "blob.xyz", b"xyz")
    write_manifest(root / "main-manifest.json", {"namespace": "my.ext", "version": "1.0.0", "publisher": "me"})
    write_manifest(
        root / "sub" / "assets-manifest.json",
        {
            "assets": [
                {"type": "Microsoft.VSO.Icon", "path": "img/a.png"},
                {"type": "Data", "path": "data.json"},
                {"type": "Blob", "path": "../blob.xyz"},
            ]
        },
    )
    out_path = tmp_path / "dist" / "my.vsix"

    result = build_package(PackageSettings(root=root), output_path=out_path)

    assert result.vsix_path == out_path
    with zipfile.ZipFile(out_path) as archive:
        names = archive.namelist()
        assert names == [
            "sub/img/a.png",
            "sub/data.json",
            "blob.xyz",
            VSO_MANIFEST_FILENAME,
            VSIX_MANIFEST_FILENAME,
            CONTENT_TYPES_FILENAME,
        ]
        assert archive.read("sub/img/a.png") == b"\x89PNG"
        assert json.loads(archive.read(VSO_MANIFEST_FILENAME))["namespace"] == "my.ext"

        vsix_text = archive.read(VSIX_MANIFEST_FILENAME).decode("utf-8")
        assert 'Type="Microsoft.VSO.Manifest" Path="extension.vsomanifest"' in vsix_text
        assert 'd:Source="File" Path="sub/img/a.png"' in vsix_text

        mapping, count = _content_types(archive)
        assert count == len(mapping) == 5
        assert mapping == {
            "png": "application/octet-stream",
            "json": "application/json",
            "xyz": "application/octet-stream",
            "vsomanifest": "application/json",
            "vsixmanifest": "text/xml",
        }
    assert not out_path.with_name("my.vsix.partial").exists()


def test_prepare_manifests_is_idempotent(tmp_path: Path) -> None:
    merged = merge_partials([], tmp_path)
    writer = VsixWriter(merged.vso_manifest, merged.vsix_manifest)

    writer.prepare_manifests()
    VsixWriter(merged.vso_manifest, merged.vsix_manifest)

    reserved = [
        asset for asset in _asset_entries(merged.vsix_manifest) if asset["$"]["Type"] == VSO_MANIFEST_ASSET_TYPE
    ]
    assert reserved == [{"$": {"Type": VSO_MANIFEST_ASSET_TYPE, "Path": VSO_MANIFEST_FILENAME}}]


def test_prepare_manifests_replaces_reserved_entries_of_any_case() -> None:
    vsix = {
        "PackageManifest": {
            "Assets": [{"Asset": [{"$": {"Type": "microsoft.vso.manifest", "Path": "old.json"}}]}],
        }
    }

    VsixWriter({}, vsix)

    assert _asset_entries(vsix) == [{"$": {"Type": VSO_MANIFEST_ASSET_TYPE, "Path": VSO_MANIFEST_FILENAME}}]


def test_prepare_manifests_creates_missing_assets_node() -> None:
    vsix: dict = {"PackageManifest": {}}

    VsixWriter({}, vsix)

    assert _asset_entries(vsix) == [{"$": {"Type": VSO_MANIFEST_ASSET_TYPE, "Path": VSO_MANIFEST_FILENAME}}]


def test_write_vsix_without_root_fails_before_writing(tmp_path: Path) -> None:
    out_path = tmp_path / "out.vsix"
    writer = VsixWriter({"namespace": "x"}, {"PackageManifest": {}})

    with pytest.raises(MissingContextError, match="Manifest root unknown"):
        writer.write_vsix(out_path)
    assert not out_path.exists()


def test_absolute_asset_path_aborts_before_archive(tmp_path: Path, write_manifest) -> None:
    write_manifest(tmp_path / "bad-manifest.json", {"assets": [{"type": "A", "path": str(tmp_path / "a.png")}]})
    out_path = tmp_path / "out.vsix"

    with pytest.raises(ManifestSchemaError, match="relative"):
        build_package(PackageSettings(root=tmp_path), output_path=out_path)
    assert not out_path.exists()


def test_malformed_asset_aborts_before_archive(tmp_path: Path, write_manifest) -> None:
    write_manifest(tmp_path / "bad-manifest.json", {"assets": [{"type": "A", "path": "a.png", "extra": 1}]})
    out_path = tmp_path / "out.vsix"

    with pytest.raises(ManifestSchemaError, match="type and a path"):
        build_package(PackageSettings(root=tmp_path), output_path=out_path)
    assert not out_path.exists()


def test_content_types_one_default_per_distinct_extension() -> None:
    document = content_types_document(["a.json", "b/c.json", "d.xyz", "e.JPG", "f.jpg", "noext"])

    defaults = [entry["$"] for entry in document["Types"]["Default"]]
    assert document["Types"]["$"]["xmlns"] == CONTENT_TYPES_NAMESPACE
    assert defaults == [
        {"Extension": "json", "ContentType": "application/json"},
        {"Extension": "xyz", "ContentType": "application/octet-stream"},
        {"Extension": "JPG", "ContentType": "application/octet-stream"},
        {"Extension": "jpg", "ContentType": "image/jpg"},
        {"Extension": "", "ContentType": "application/octet-stream"},
    ]


def test_overrides_are_merged_last(tmp_path: Path, write_manifest) -> None:
    write_manifest(tmp_path / "main-manifest.json", {"namespace": "from.file", "version": "1.0.0"})
    settings = PackageSettings(root=tmp_path, overrides={"version": "2.0.0"})
    out_path = tmp_path / "out.vsix"

    result = build_package(settings, output_path=out_path)

    assert result.manifests.vso_manifest["namespace"] == "from.file"
    assert result.manifests.vso_manifest["version"] == "2.0.0"


def test_auto_output_path_uses_identity(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    vsix = {"PackageManifest": {"Metadata": [{"Identity": [{"$": {"Id": "ext", "Version": "1.2.3", "Publisher": "pub"}}]}]}}

    assert default_vsix_name(vsix) == "pub.ext-1.2.3.vsix"
    assert default_vsix_name({}) == "extension.vsix"
    assert resolve_output_path("{auto}", vsix) == Path.cwd() / "pub.ext-1.2.3.vsix"
    assert resolve_output_path("out/x.vsix", vsix) == Path.cwd() / "out" / "x.vsix"


def test_capitalized_assets_key_cannot_pull_in_absolute_files(
    tmp_path: Path, write_manifest, write_asset
) -> None:
    outside = write_asset(tmp_path / "outside-secret.txt", b"secret")
    root = tmp_path / "ext"
    write_manifest(root / "main-manifest.json", {"Assets": [{"type": "T", "path": str(outside)}]})
    out_path = tmp_path / "out.vsix"

    with pytest.raises(ManifestSchemaError, match="relative"):
        build_package(PackageSettings(root=root), output_path=out_path)
    assert not out_path.exists()


def test_prepare_manifests_drops_assets_using_the_service_manifest_path() -> None:
    vsix = {
        "PackageManifest": {
            "Assets": [{"Asset": [{"$": {"Type": "Custom", "d:Source": "File", "Path": VSO_MANIFEST_FILENAME}}]}],
        }
    }

    VsixWriter({}, vsix)

    assert _asset_entries(vsix) == [{"$": {"Type": VSO_MANIFEST_ASSET_TYPE, "Path": VSO_MANIFEST_FILENAME}}]
