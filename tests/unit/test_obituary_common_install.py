"""Unit tests for obituary_common pip install approach"""

from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent.parent

LAMBDA_FUNCTIONS = [
    "scrape_obituaries",
    "update_cron_schedule",
    "get_cron_jobs",
    "scrape_history",
]


class TestSetupPy:
    """Tests for lib/setup.py structure and validity"""

    def test_setup_py_exists(self):
        """Verify lib/setup.py exists"""
        setup_path = ROOT / "lib/setup.py"
        assert setup_path.exists(), "lib/setup.py should exist for package installation"

    def test_setup_py_valid_syntax(self):
        """Verify setup.py has valid Python syntax"""
        setup_path = ROOT / "lib/setup.py"
        setup_code = setup_path.read_text()

        try:
            compile(setup_code, str(setup_path), "exec")
        except SyntaxError as e:
            pytest.fail(f"setup.py has invalid syntax: {e}")

    def test_setup_py_defines_obituary_common_package(self):
        content = (ROOT / "lib/setup.py").read_text()

        assert 'name="obituary_common"' in content
        assert "packages=" in content

    def test_setup_py_has_required_dependencies(self):
        """Verify setup.py declares required dependencies"""
        content = (ROOT / "lib/setup.py").read_text()

        assert "install_requires=" in content, "setup.py should have install_requires section"
        assert "boto3" in content, "setup.py should include boto3 dependency"
        assert "httpx" in content, "setup.py should include httpx dependency"


class TestObituaryCommonStructure:
    """Tests for obituary_common package structure"""

    def test_package_has_init(self):
        assert (ROOT / "lib/obituary_common/__init__.py").exists()
        assert (ROOT / "lib/obituary_common/scraper/__init__.py").exists()

    def test_package_has_required_modules(self):
        """Verify obituary_common has all required modules"""
        required_modules = [
            "config.py",
            "constants.py",
            "exceptions.py",
            "logging_utils.py",
            "scheduler.py",
            "sources.py",
            "storage.py",
            "scraper/coordinator.py",
            "scraper/dedup.py",
            "scraper/extractor.py",
            "scraper/fetcher.py",
            "scraper/fields.py",
            "scraper/models.py",
        ]

        pkg_dir = ROOT / "lib/obituary_common"

        for module in required_modules:
            assert (pkg_dir / module).exists(), f"Required module {module} should exist"


class TestLambdaFunctions:
    """Tests for Lambda function entry points"""

    @pytest.mark.parametrize("func_name", LAMBDA_FUNCTIONS)
    def test_lambda_imports_obituary_common(self, func_name):
        index_path = ROOT / f"src/lambda/{func_name}/index.py"
        assert index_path.exists(), f"{func_name}/index.py should exist"

        content = index_path.read_text()
        assert "from obituary_common" in content, f"{func_name} should import from obituary_common"
        assert "def lambda_handler(event, context)" in content

    def test_no_symlinks_in_lambda_directories(self):
        """Verify no obituary_common symlinks exist in Lambda function directories"""
        for func_dir in (ROOT / "src/lambda").iterdir():
            if func_dir.is_dir():
                link = func_dir / "obituary_common"
                if link.exists():
                    assert not link.is_symlink(), (
                        f"obituary_common in {func_dir.name} should not be a symlink"
                    )
