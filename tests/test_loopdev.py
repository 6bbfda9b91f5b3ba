"""Tests for loop device handling."""
import logging

import pytest

from generic_image_builder.errors import CommandExecutionError, LoopDeviceError
from generic_image_builder.lib.loopdev import LoopDevice, attach_loop_device, describe_loop_device


class TestLoopDevice:
    def test_partition_names(self):
        loop = LoopDevice("/dev/loop7")

        assert loop.boot_partition() == "/dev/loop7p1"
        assert loop.root_partition() == "/dev/loop7p2"
        assert str(loop) == "/dev/loop7"

    def test_equality(self):
        assert LoopDevice("/dev/loop0") == LoopDevice("/dev/loop0")
        assert LoopDevice("/dev/loop0") != LoopDevice("/dev/loop1")


class TestAttachLoopDevice:
    def test_returns_first_device(self, make_executor):
        executor = make_executor(responses={"losetup": "/dev/loop3\n"})

        loop = attach_loop_device(executor, "/work/disk.img", cwd="/work")

        assert loop == LoopDevice("/dev/loop3")
        assert executor.calls[0].argv == ["losetup", "--show", "-fP", "/work/disk.img"]
        assert executor.calls[0].cwd == "/work"

    def test_extra_devices_ignored(self, make_executor, caplog):
        executor = make_executor(responses={"losetup": "/dev/loop3\n/dev/loop4\n"})

        with caplog.at_level(logging.WARNING):
            loop = attach_loop_device(executor, "disk.img")

        assert loop.path == "/dev/loop3"
        assert "returned 2 devices" in caplog.text

    @pytest.mark.parametrize("output", ["", "\n", "  \n\n"])
    def test_no_device(self, make_executor, output):
        executor = make_executor(responses={"losetup": output})

        with pytest.raises(LoopDeviceError, match="disk.img"):
            attach_loop_device(executor, "disk.img")


class TestDescribeLoopDevice:
    def test_logs_status(self, make_executor, caplog):
        executor = make_executor(
            responses={"losetup": "NAME SIZELIMIT\n/dev/loop7 0\n", "fdisk": "Disk /dev/loop7: 2.5 GiB\n"}
        )

        with caplog.at_level(logging.INFO):
            describe_loop_device(executor, LoopDevice("/dev/loop7"))

        assert executor.programs == ["losetup", "fdisk"]
        assert executor.calls[0].argv == ["losetup", "-l", "/dev/loop7"]
        assert executor.calls[1].argv == ["fdisk", "-l", "/dev/loop7"]
        assert "Disk /dev/loop7: 2.5 GiB" in caplog.text

    @pytest.mark.parametrize("program", ["losetup", "fdisk"])
    def test_failure_propagates(self, make_executor, program):
        executor = make_executor(fail_on={program})

        with pytest.raises(CommandExecutionError, match=program):
            describe_loop_device(executor, LoopDevice("/dev/loop7"))
