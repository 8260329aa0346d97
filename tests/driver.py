import os
import sys

parent_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.append(parent_dir)
sys.path.append(os.path.dirname(__file__))

import unittest

# Import all test modules
from core_tests.test_config import *
from core_tests.test_vectors import *
from core_tests.test_matching import *
from core_tests.test_embeddings import *
from core_tests.test_providers import *
from integration_tests.test_engine_integration import *

if __name__ == '__main__':
    unittest.main()
