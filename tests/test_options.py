import unittest
import sys
import os

# Add parent directory to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from event_registry import EventRegistry, Expiration, OptionsError, SubscriptionOptions


class TestPermissiveOptions(unittest.TestCase):
    def test_none_gives_defaults(self):
        options = SubscriptionOptions.from_dict(None)
        self.assertEqual(options, SubscriptionOptions())
        self.assertFalse(options.remove_after_execute)
        self.assertIsNone(options.expire_after)
        self.assertFalse(options.only_one_instance)

    def test_all_fields(self):
        on_expire = lambda: None
        options = SubscriptionOptions.from_dict({
            'remove_after_execute': True,
            'expire_after': {'timeout_ms': 250, 'on_expire': on_expire},
            'only_one_instance': True,
        })
        self.assertTrue(options.remove_after_execute)
        self.assertTrue(options.only_one_instance)
        self.assertEqual(options.expire_after.timeout_ms, 250.0)
        self.assertEqual(options.expire_after.timeout_seconds, 0.25)
        self.assertIs(options.expire_after.on_expire, on_expire)

    def test_unknown_keys_ignored_with_warning(self):
        with self.assertLogs('event_registry', level='WARNING') as logs:
            options = SubscriptionOptions.from_dict({'onlyOneInstance': True})
        self.assertFalse(options.only_one_instance)
        self.assertIn("onlyOneInstance", logs.output[0])

    def test_invalid_flag_falls_back(self):
        with self.assertLogs('event_registry', level='WARNING'):
            options = SubscriptionOptions.from_dict({'remove_after_execute': 'yes'})
        self.assertFalse(options.remove_after_execute)

    def test_invalid_timeout_disables_expiration(self):
        for timeout in (0, -5, 'soon', True):
            with self.subTest(timeout=timeout):
                with self.assertLogs('event_registry', level='WARNING'):
                    options = SubscriptionOptions.from_dict({'expire_after': {'timeout_ms': timeout}})
                self.assertIsNone(options.expire_after)

    def test_missing_timeout_disables_expiration(self):
        with self.assertLogs('event_registry', level='WARNING'):
            options = SubscriptionOptions.from_dict({'expire_after': {'on_expire': print}})
        self.assertIsNone(options.expire_after)

    def test_non_callable_on_expire_replaced(self):
        with self.assertLogs('event_registry', level='WARNING'):
            options = SubscriptionOptions.from_dict({'expire_after': Expiration(10, on_expire=42)})
        self.assertEqual(options.expire_after.timeout_ms, 10.0)
        self.assertIsNone(options.expire_after.on_expire())

    def test_expiration_default_callback(self):
        expiration = Expiration(100)
        self.assertIsNone(expiration.on_expire())

    def test_registry_tolerates_unsupported_options(self):
        registry = EventRegistry()
        calls = []
        with self.assertLogs('event_registry', level='WARNING'):
            registry.subscribe('evt', lambda: calls.append(1), ['not', 'options'])
        registry.emit('evt')
        registry.emit('evt')
        self.assertEqual(calls, [1, 1])


class TestStrictOptions(unittest.TestCase):
    def test_unknown_key_rejected(self):
        with self.assertRaises(OptionsError):
            SubscriptionOptions.from_dict({'bogus': 1}, strict=True)

    def test_invalid_values_rejected(self):
        bad = [
            {'remove_after_execute': 1},
            {'only_one_instance': 'true'},
            {'expire_after': {'timeout_ms': -1}},
            {'expire_after': {'on_expire': print}},
            {'expire_after': {'timeout_ms': 10, 'extra': 1}},
            {'expire_after': 10},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(OptionsError):
                    SubscriptionOptions.from_dict(data, strict=True)

    def test_non_dict_rejected(self):
        with self.assertRaises(OptionsError):
            SubscriptionOptions.from_dict(['remove_after_execute'], strict=True)

    def test_strict_registry(self):
        registry = EventRegistry(strict_options=True)
        with self.assertRaises(OptionsError):
            registry.subscribe('evt', lambda: None, {'expire_after': {'timeout_ms': 0}})
        with self.assertRaises(OptionsError):
            registry.subscribe('evt', lambda: None, SubscriptionOptions(only_one_instance='x'))
        with self.assertRaises(OptionsError):
            registry.subscribe('evt', lambda: None, 3)
        self.assertFalse(registry.has_event('evt'))

    def test_valid_options_accepted(self):
        registry = EventRegistry(strict_options=True)
        handle = registry.once('evt', lambda: None, {'only_one_instance': True})
        execution = registry.get_execution('evt', handle.execution_id)
        self.assertTrue(execution.options.remove_after_execute)
        self.assertTrue(execution.options.only_one_instance)


if __name__ == '__main__':
    unittest.main()
