"""Tests for source and build-config discovery on disk."""

from pathlib import Path

from transient_scan.discovery import find_build_config, find_source_files, load_sources


class TestFindSourceFiles:
    """Test recursive .sol discovery."""

    def test_sample_project_skips_test_dir(self, sample_project_path: Path):
        """Test default ignored directories are not scanned."""
        found = find_source_files(sample_project_path)
        names = [p.relative_to(sample_project_path).as_posix() for p in found]

        assert names == ["src/Base.sol", "src/LibSlots.sol", "src/Vault.sol"]

    def test_custom_ignore_list(self, sample_project_path: Path):
        """Test an empty ignore list scans every directory."""
        found = find_source_files(sample_project_path, ignored_dirs=[])
        names = [p.name for p in found]

        assert "Vault.t.sol" in names

    def test_single_file_target(self, sample_project_path: Path):
        """Test a file target yields itself only if it is Solidity."""
        vault = sample_project_path / "src" / "Vault.sol"

        assert find_source_files(vault) == [vault]
        assert find_source_files(sample_project_path / "foundry.toml") == []


class TestLoadSources:
    """Test reading source files."""

    def test_unreadable_files_are_skipped(self, temp_dir: Path):
        """Test undecodable files are dropped instead of failing the scan."""
        good = temp_dir / "Good.sol"
        good.write_text("contract Good {}", encoding="utf-8")
        bad = temp_dir / "Bad.sol"
        bad.write_bytes(b"\xff\xfe\xfa contract")

        sources = load_sources([bad, good])

        assert [s.path for s in sources] == [str(good)]
        assert sources[0].text == "contract Good {}"


class TestFindBuildConfig:
    """Test upward search for foundry.toml / hardhat.config.*."""

    def test_found_from_nested_source(self, sample_project_path: Path):
        """Test a file inside src/ finds the project's foundry.toml."""
        found = find_build_config(sample_project_path / "src" / "Vault.sol")

        assert found.found
        assert found.name == "foundry.toml"
        assert "via_ir = true" in found.content

    def test_cwd_fallback(self, temp_dir: Path):
        """Test the working directory is checked last."""
        target = temp_dir / "a" / "b" / "c"
        target.mkdir(parents=True)
        cwd = temp_dir / "elsewhere"
        cwd.mkdir()
        (cwd / "hardhat.config.js").write_text('module.exports = { solidity: "0.8.28" };')

        found = find_build_config(target, cwd=cwd)

        assert found.name == "hardhat.config.js"

    def test_not_found(self, temp_dir: Path):
        """Test a missing config is reported with the sentinel name."""
        target = temp_dir / "a" / "b" / "c"
        target.mkdir(parents=True)

        found = find_build_config(target, cwd=temp_dir)

        assert not found.found
        assert found.name == "None"
        assert found.content == ""
