from tests.framework.loader import load_test_cases, load_test_cases_from_dir
from tests.framework.runner import YamlTestRunner
from tests.framework.types import YamlTestCase

__all__ = ["YamlTestCase", "YamlTestRunner", "load_test_cases", "load_test_cases_from_dir"]
