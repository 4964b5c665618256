# SPDX-License-Identifier: BUSL-1.1
"""Tests for build definition loading and validation."""

import sys
import tempfile
import textwrap
import unittest
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from graftpack.config.loader import ConfigStore
from graftpack.config.resources import ImageBuild, resource_from_dict, resource_to_dict
from graftpack.config.validation import ValidationError, has_parent_ref, parse_user, validate_build


class TestImageBuildDefaults(unittest.TestCase):
    def test_defaults_describe_graftopstat(self):
        build = ImageBuild()
        self.assertEqual(build.name, "graftopstat")
        self.assertEqual(build.base, "scratch")
        self.assertEqual(build.artifact, "./target/release/graftopstat")
        self.assertEqual(build.packages, ["procps-ng", "net-tools"])
        self.assertEqual(build.runtime.user, "1000:1000")
        self.assertEqual(build.entrypoint_vector(), ["/graftopstat"])
        self.assertEqual(build.commit.format, "docker")

    def test_default_package_lists_are_independent(self):
        a = ImageBuild()
        a.packages.append("curl")
        self.assertEqual(ImageBuild().packages, ["procps-ng", "net-tools"])


class TestResourceSerialization(unittest.TestCase):
    def test_from_dict_accepts_camel_case(self):
        build = resource_from_dict({
            "apiVersion": "graftpack/v1",
            "kind": "ImageBuild",
            "metadata": {"name": "tool"},
            "spec": {
                "artifact": "bin/tool",
                "packages": ["glibc"],
                "runtime": {"user": "2000:2000"},
                "installer": {"dbPath": "var/lib/pacman-alt"},
            },
        })
        self.assertEqual(build.name, "tool")
        self.assertEqual(build.packages, ["glibc"])
        self.assertEqual(build.runtime.user, "2000:2000")
        self.assertEqual(build.entrypoint_path(), "/tool")
        self.assertEqual(build.installer.db_path, "var/lib/pacman-alt")
        self.assertEqual(build.installer.manager, "pacman")

    def test_to_dict_uses_resource_layout(self):
        data = resource_to_dict(ImageBuild())
        self.assertEqual(data["apiVersion"], "graftpack/v1")
        self.assertEqual(data["kind"], "ImageBuild")
        self.assertEqual(data["metadata"], {"name": "graftopstat"})
        self.assertEqual(data["spec"]["installer"]["dbPath"], "var/lib/pacman")
        self.assertNotIn("name", data["spec"])

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            resource_from_dict({"kind": "Project", "spec": {}})


class TestConfigStore(unittest.TestCase):
    def test_defaults_without_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = ConfigStore(work_dir=Path(tmpdir))
            self.assertEqual(store.load_build(), ImageBuild())
            self.assertEqual(store.source(), "built-in defaults")

    def test_reads_graftpack_yaml_from_work_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "graftpack.yaml").write_text(textwrap.dedent("""\
                apiVersion: graftpack/v1
                kind: ImageBuild
                metadata:
                  name: graftopstat
                spec:
                  packages: [procps-ng]
                  commit:
                    format: oci
                """))
            build = ConfigStore(work_dir=Path(tmpdir)).load_build()
            self.assertEqual(build.packages, ["procps-ng"])
            self.assertEqual(build.commit.format, "oci")
            self.assertEqual(build.runtime.user, "1000:1000")

    def test_explicit_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = ConfigStore(config_file=Path(tmpdir) / "nope.yaml")
            with self.assertRaises(FileNotFoundError):
                store.load_build()

    def test_non_mapping_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "graftpack.yaml"
            path.write_text("- just\n- a list\n")
            with self.assertRaises(ValueError):
                ConfigStore(config_file=path).load_build()

    def test_described_build_loads_back(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = ConfigStore(work_dir=Path(tmpdir))
            build = ImageBuild(name="other", packages=["net-tools"])
            store.config_file.write_text(yaml.dump(resource_to_dict(build), sort_keys=False))
            self.assertEqual(store.load_build(), build)

    def test_malformed_yaml_is_value_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "graftpack.yaml"
            path.write_text("kind: [ImageBuild\n")
            with self.assertRaises(ValueError) as ctx:
                ConfigStore(config_file=path).load_build()
            self.assertIn("invalid YAML", str(ctx.exception))

    def test_scalar_package_becomes_one_item_list(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "graftpack.yaml"
            path.write_text("kind: ImageBuild\nspec:\n  packages: procps-ng\n")
            build = ConfigStore(config_file=path).load_build()
            self.assertEqual(build.packages, ["procps-ng"])

    def test_string_values_are_stripped(self):
        build = resource_from_dict({
            "kind": "ImageBuild",
            "spec": {"runtime": {"user": " 1000:1000 ", "entrypoint": " /graftopstat "}},
        })
        self.assertEqual(build.runtime.user, "1000:1000")
        self.assertEqual(build.entrypoint_vector(), ["/graftopstat"])

    def test_resolve_artifact_relative_to_work_dir(self):
        work = Path("/srv/graftopstat")
        store = ConfigStore(config_file=work / "graftpack.yaml", work_dir=work)
        self.assertEqual(
            store.resolve_artifact(ImageBuild()),
            work / "target" / "release" / "graftopstat",
        )
        self.assertEqual(
            store.resolve_artifact(ImageBuild(artifact="/opt/bin/tool")),
            Path("/opt/bin/tool"),
        )


class TestValidation(unittest.TestCase):
    def test_defaults_are_valid(self):
        result = validate_build(ImageBuild())
        self.assertTrue(result.valid)
        self.assertEqual(result.warnings, [])

    def test_parse_user(self):
        self.assertEqual(parse_user("1000:1000"), (1000, 1000))
        self.assertIsNone(parse_user("dev:dev"))
        self.assertIsNone(parse_user("1000"))

    def test_root_user_rejected(self):
        for user in ("0:0", "0:1000", "1000:0"):
            build = ImageBuild()
            build.runtime.user = user
            result = validate_build(build)
            self.assertFalse(result.valid, user)
            self.assertIn("root", result.errors[0])

    def test_named_user_rejected(self):
        build = ImageBuild()
        build.runtime.user = "nobody"
        self.assertFalse(validate_build(build).valid)

    def test_relative_entrypoint_rejected(self):
        build = ImageBuild()
        build.runtime.entrypoint = "graftopstat"
        self.assertFalse(validate_build(build).valid)

    def test_bad_image_name(self):
        for name in ("", "GraftOpStat", "bad name", "-leading"):
            self.assertFalse(validate_build(ImageBuild(name=name)).valid, name)
        for name in ("graftopstat", "graftopstat:dev", "localhost:5000/acme/graftopstat"):
            self.assertTrue(validate_build(ImageBuild(name=name)).valid, name)

    def test_unsupported_format_and_manager(self):
        build = ImageBuild()
        build.commit.format = "tar"
        build.installer.manager = "apt"
        self.assertEqual(len(validate_build(build).errors), 2)

    def test_absolute_db_path_rejected(self):
        build = ImageBuild()
        build.installer.db_path = "/var/lib/pacman"
        self.assertFalse(validate_build(build).valid)

    def test_warnings(self):
        build = ImageBuild(base="archlinux", packages=["a", "b", "a"])
        result = validate_build(build)
        self.assertTrue(result.valid)
        self.assertEqual(len(result.warnings), 2)
        self.assertIn("duplicate packages will be installed once: a", result.warnings[1])

        empty = validate_build(ImageBuild(packages=[]))
        self.assertTrue(empty.valid)
        self.assertIn("no runtime packages", empty.warnings[0])

    def test_user_with_surrounding_whitespace_rejected(self):
        self.assertIsNone(parse_user(" 1000:1000 "))
        self.assertIsNone(parse_user("1000:1000\n"))
        build = ImageBuild()
        build.runtime.user = " 1000:1000"
        self.assertFalse(validate_build(build).valid)

    def test_parent_refs_rejected(self):
        build = ImageBuild()
        build.runtime.entrypoint = "/../escaped"
        result = validate_build(build)
        self.assertFalse(result.valid)
        self.assertIn("must not contain '..'", result.errors[0])

        build = ImageBuild()
        build.installer.db_path = "var/../../host-db"
        result = validate_build(build)
        self.assertFalse(result.valid)
        self.assertIn("installer.dbPath", result.errors[0])

        self.assertFalse(has_parent_ref("/usr/local/bin/graftopstat"))
        self.assertFalse(has_parent_ref("/opt/..hidden"))

    def test_raise_if_invalid(self):
        build = ImageBuild(artifact="")
        with self.assertRaises(ValidationError) as ctx:
            validate_build(build).raise_if_invalid()
        self.assertIn("artifact path is empty", ctx.exception.errors)


if __name__ == "__main__":
    unittest.main(verbosity=2)
