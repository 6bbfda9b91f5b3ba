"""Tests for config validation and the required tool gate."""
import pytest

from generic_image_builder.build_config import parse_build_config
from generic_image_builder.errors import ToolMissingError, ValidationError
from generic_image_builder.preflight import REQUIRED_TOOLS, check_required_tools, validate_config


class TestValidateConfig:
    def test_valid(self, build_config):
        validate_config(build_config)

    def test_workdir_exists(self, build_config):
        build_config.workdir.mkdir()

        with pytest.raises(ValidationError, match="already exists"):
            validate_config(build_config)

    def test_content_base_missing(self, raw_config, tmp_path):
        raw_config["content"]["base"] = str(tmp_path / "missing")

        with pytest.raises(ValidationError, match="content directory"):
            validate_config(parse_build_config(raw_config))

    def test_local_package_dir_missing(self, raw_config, tmp_path):
        raw_config["content"]["local_package_dir"] = str(tmp_path / "debs")

        with pytest.raises(ValidationError, match="local package directory"):
            validate_config(parse_build_config(raw_config))

    @pytest.mark.parametrize("size", ["1MiB", 0, (2048 + 34) * 512])
    def test_root_size_too_small(self, raw_config, size):
        raw_config["image"]["size"] = size

        with pytest.raises(ValidationError, match="minimum root size"):
            validate_config(parse_build_config(raw_config))

    def test_smallest_root_size_accepted(self, raw_config):
        raw_config["image"]["size"] = (2048 + 34 + 1) * 512

        validate_config(parse_build_config(raw_config))

    def test_local_package_dir_present(self, raw_config, tmp_path):
        (tmp_path / "debs").mkdir()
        raw_config["content"]["local_package_dir"] = str(tmp_path / "debs")

        validate_config(parse_build_config(raw_config))


class TestCheckRequiredTools:
    def test_required_set(self):
        assert set(REQUIRED_TOOLS) == {
            "sfdisk",
            "debootstrap",
            "mount",
            "dd",
            "losetup",
            "mkfs.vfat",
            "mkfs.ext4",
            "chroot",
            "apt",
        }

    def test_all_present(self, all_tools_present):
        check_required_tools(which=all_tools_present)

    def test_reports_every_missing_tool(self):
        missing = {"debootstrap", "mkfs.vfat"}

        with pytest.raises(ToolMissingError) as exc:
            check_required_tools(which=lambda name: None if name in missing else f"/usr/sbin/{name}")

        assert set(exc.value.tools) == missing
        assert "debootstrap" in str(exc.value)

    def test_custom_tool_list(self):
        with pytest.raises(ToolMissingError, match="qemu-img"):
            check_required_tools(["qemu-img"], which=lambda name: None)
