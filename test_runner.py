#!/usr/bin/env python3
"""
Test runner for the Movie List Manager.

Discovers the unittest suites under tests/ and prints a summary per module.
"""

import unittest
import sys
import os
import time
from io import StringIO

# Add src and tests to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'tests'))

MODULES = [
    ("csv_import", "📄 CSV Parsing & Upload Decoding"),
    ("models", "🎞️  Movie Entries & Lists"),
    ("list_store", "🗄️  Firestore & In-Memory List Store"),
    ("list_manager", "📋 List Operations & Selection State"),
    ("movie_of_the_day", "✨ Movie of the Day"),
    ("navigation", "🧭 Screens & Subscriptions"),
    ("auth_session", "🔑 Session Authentication"),
    ("firebase_client", "🔥 Firebase Client Setup"),
    ("utils", "🛠️  Configuration & Settings"),
]

def run_all_tests():
    """Run all tests and generate a report."""

    print("🎬 Movie List Manager - Test Suite")
    print("=" * 60)

    loader = unittest.TestLoader()
    start_dir = os.path.join(os.path.dirname(__file__), 'tests')
    suite = loader.discover(start_dir, pattern='test_*.py')

    stream = StringIO()
    runner = unittest.TextTestRunner(
        stream=stream,
        verbosity=2,
        buffer=True,
        failfast=False
    )

    print(f"📍 Running tests from: {start_dir}")
    print(f"🔍 Test pattern: test_*.py")
    print("-" * 60)

    start_time = time.time()
    result = runner.run(suite)
    end_time = time.time()

    print("📊 TEST RESULTS")
    print("-" * 60)

    print(f"⏱️  Total time: {end_time - start_time:.2f} seconds")
    print(f"🧪 Tests run: {result.testsRun}")
    print(f"✅ Passed: {result.testsRun - len(result.failures) - len(result.errors)}")
    print(f"❌ Failed: {len(result.failures)}")
    print(f"💥 Errors: {len(result.errors)}")
    print(f"⏭️  Skipped: {len(result.skipped)}")

    if result.failures:
        print("\n🚨 FAILURES:")
        print("-" * 40)
        for test, traceback in result.failures:
            print(f"❌ {test}")
            print(f"   {traceback.strip()}")

    if result.errors:
        print("\n💥 ERRORS:")
        print("-" * 40)
        for test, traceback in result.errors:
            print(f"💥 {test}")
            print(f"   {traceback.strip()}")

    print("\n" + "=" * 60)
    if result.wasSuccessful():
        print("🎉 ALL TESTS PASSED! 🎉")
    elif result.testsRun:
        total_issues = len(result.failures) + len(result.errors)
        success_rate = ((result.testsRun - total_issues) / result.testsRun) * 100
        print(f"⚠️  Some tests failed. Success rate: {success_rate:.1f}%")

    print("\n📋 TEST COVERAGE BY MODULE:")
    print("-" * 40)

    for module, description in MODULES:
        test_path = os.path.join(start_dir, f"test_{module}.py")
        if os.path.exists(test_path):
            print(f"✅ {description}")
        else:
            print(f"❌ {description} - MISSING TEST FILE")

    return result.wasSuccessful()

def run_specific_module(module_name):
    """Run tests for a specific module."""

    print(f"🎬 Running tests for module: {module_name}")
    print("=" * 60)

    test_file = os.path.join(os.path.dirname(__file__), 'tests', f"test_{module_name}.py")
    if not os.path.exists(test_file):
        print(f"❌ Test file not found: {test_file}")
        return False

    try:
        suite = unittest.TestLoader().loadTestsFromName(f'test_{module_name}')
    except (ImportError, AttributeError) as e:
        print(f"❌ Error loading tests: {e}")
        return False

    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return result.wasSuccessful()

def main():
    """Run tests based on command line arguments."""

    if len(sys.argv) > 1:
        if sys.argv[1] == "--help":
            print("🎬 Movie List Manager Test Runner")
            print("\nUsage:")
            print("  python test_runner.py                 - Run all tests")
            print("  python test_runner.py <module_name>   - Run specific module tests")
            print("\nAvailable modules:")
            print("  " + ", ".join(module for module, _ in MODULES))
            return True
        else:
            return run_specific_module(sys.argv[1])

    return run_all_tests()

if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
