from __future__ import annotations

import unittest


class TestPublicApiLockContract(unittest.TestCase):
    def test_api_module_exports_are_present(self) -> None:
        import eisenmatrix.api as api

        self.assertTrue(hasattr(api, "__all__"))
        self.assertIsInstance(api.__all__, (list, tuple))
        self.assertEqual(len(api.__all__), len(api._PUBLIC_EXPORTS))

        for name in api.__all__:
            self.assertIsInstance(name, str)
            self.assertTrue(hasattr(api, name), f"eisenmatrix.api missing public name: {name}")
            self.assertIsNotNone(getattr(api, name), f"eisenmatrix.api {name} is None")

    def test_package_reexports_match_api_all(self) -> None:
        import eisenmatrix
        import eisenmatrix.api as api

        self.assertEqual(eisenmatrix.__all__, api.__all__)
        for name in api.__all__:
            self.assertTrue(hasattr(eisenmatrix, name), f"eisenmatrix package does not re-export: {name}")
            self.assertIs(getattr(eisenmatrix, name), getattr(api, name))

    def test_core_operations_are_public(self) -> None:
        import eisenmatrix.api as api

        for name in ("is_active_on", "status_on", "period_key", "filter_for_view", "TaskStore", "export_csv", "import_csv"):
            self.assertIn(name, api.__all__)


class TestPublicExportsOrderContract(unittest.TestCase):
    def test_public_exports_are_sorted_and_consistent(self) -> None:
        import eisenmatrix.api as api

        self.assertIsInstance(api._PUBLIC_EXPORTS, tuple)

        # No duplicates
        self.assertEqual(len(set(api._PUBLIC_EXPORTS)), len(api._PUBLIC_EXPORTS))

        # Alphabetical
        self.assertEqual(list(api._PUBLIC_EXPORTS), sorted(api._PUBLIC_EXPORTS))

        # __all__ respects _PUBLIC_EXPORTS order (filtered to defined names)
        expected_all = [n for n in api._PUBLIC_EXPORTS if n in api.__dict__]
        self.assertEqual(api.__all__, expected_all)


if __name__ == "__main__":
    unittest.main(verbosity=2)
