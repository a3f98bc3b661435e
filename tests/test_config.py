"""
Unit Tests - Configuration and service context

Module: tests.test_config
Date: 2026-10-19
Version: 0.1.0
"""

import threading
import unittest
from unittest.mock import MagicMock

from chirpy_server.core.config import ConfigError, ServerConfig
from chirpy_server.core.constants import DEFAULT_DB_PATH, DEFAULT_PORT, DEV_JWT_SECRET
from chirpy_server.core.context import ServiceContext


class TestServerConfig(unittest.TestCase):

    def test_defaults(self):
        config = ServerConfig.from_env({})
        self.assertEqual(config.jwt_secret, DEV_JWT_SECRET)
        self.assertEqual(config.polka_api_key, "")
        self.assertEqual(config.db_path, DEFAULT_DB_PATH)
        self.assertEqual(config.port, DEFAULT_PORT)
        self.assertFalse(config.reset_database)

    def test_reads_environment(self):
        config = ServerConfig.from_env({
            "JWT_SECRET": "s" * 40,
            "POLKA_API_KEY": "f271c81ff7084ee5b99a5091b42d486e",
            "CHIRPY_DB_PATH": "/tmp/chirpy.json",
            "CHIRPY_PORT": "9000",
            "CHIRPY_LOG_LEVEL": "debug",
            "CHIRPY_BCRYPT_ROUNDS": "4",
        })
        self.assertEqual(config.jwt_secret, "s" * 40)
        self.assertEqual(config.polka_api_key, "f271c81ff7084ee5b99a5091b42d486e")
        self.assertEqual(config.db_path, "/tmp/chirpy.json")
        self.assertEqual(config.port, 9000)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.bcrypt_rounds, 4)

    def test_invalid_port(self):
        with self.assertRaises(ConfigError):
            ServerConfig.from_env({"CHIRPY_PORT": "http"})


class TestServiceContextHits(unittest.TestCase):

    def setUp(self):
        self.context = ServiceContext(
            config=ServerConfig(),
            documents=MagicMock(),
            accounts=MagicMock(),
            tokens=MagicMock(),
            posts=MagicMock(),
        )

    def test_register_and_reset(self):
        self.context.register_hit()
        self.context.register_hit()
        self.assertEqual(self.context.hit_count, 2)

        self.context.reset_hits()
        self.assertEqual(self.context.hit_count, 0)

    def test_concurrent_hits(self):
        def hit_many():
            for _ in range(500):
                self.context.register_hit()

        threads = [threading.Thread(target=hit_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(self.context.hit_count, 4000)


if __name__ == "__main__":
    unittest.main()
