"""Unit tests for per-instance temporary directories."""

from zcash_local_net.adapters.provisioning.workspace import (
    DIR_PREFIX,
    STDOUT_LOG,
    InstanceDirectories,
)


class TestInstanceDirectories:
    """Tests for InstanceDirectories."""

    def test_create_without_data_dir(self) -> None:
        directories = InstanceDirectories.create(needs_data_dir=False)
        try:
            assert directories.config_dir.is_dir()
            assert directories.logs_dir.is_dir()
            assert directories.data_dir is None
            assert directories.config_dir.name.startswith(DIR_PREFIX)
            assert directories.log_path == directories.logs_dir / STDOUT_LOG
        finally:
            directories.cleanup()

    def test_create_with_data_dir(self) -> None:
        directories = InstanceDirectories.create(needs_data_dir=True)
        try:
            assert directories.data_dir is not None
            assert directories.data_dir.is_dir()
        finally:
            directories.cleanup()

    def test_cleanup_removes_everything_and_is_idempotent(self) -> None:
        directories = InstanceDirectories.create(needs_data_dir=True)
        (directories.logs_dir / STDOUT_LOG).write_text("log\n")
        paths = [directories.config_dir, directories.logs_dir, directories.data_dir]

        directories.cleanup()
        directories.cleanup()

        assert not any(p.exists() for p in paths)
