import unittest

import pytest
from sample_services import HttpClient

from wirebox import Container, ContainerError


class TestParameterStore(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_get_parameter_returns_stored_value(self):
        self.cont.set_parameter("timeout", 30)
        assert self.cont.get_parameter("timeout") == 30

    def test_get_parameter_absent_returns_none(self):
        assert self.cont.get_parameter("timeout") is None

    def test_get_parameter_absent_returns_given_default(self):
        assert self.cont.get_parameter("timeout", 15) == 15

    def test_has_parameter(self):
        assert not self.cont.has_parameter("debug")
        self.cont.set_parameter("debug", False)
        assert self.cont.has_parameter("debug")

    def test_set_parameters_merges_mapping(self):
        self.cont.set_parameter("a", 1)
        self.cont.set_parameters({"b": 2, "a": 3})
        assert self.cont.get_parameter("a") == 3
        assert self.cont.get_parameter("b") == 2

    def test_constructor_seeds_parameters(self):
        cont = Container({"region": "eu"})
        assert cont.get_parameter("region") == "eu"

    def test_parameters_are_not_services(self):
        self.cont.set_parameter("timeout", 30)
        assert not self.cont.has("timeout")


class TestScalarAutowiring(unittest.TestCase):
    def test_builtin_parameter_read_by_name(self):
        cont = Container()
        cont.set_parameter("timeout", 30)

        client = cont.get(HttpClient)

        assert client.timeout == 30
        assert client.base_url == "http://localhost"

    def test_missing_builtin_parameter_defaults_to_none(self):
        client = Container().get(HttpClient)
        assert client.timeout is None

    def test_parameter_overrides_declared_default(self):
        cont = Container({"timeout": 1, "base_url": "https://example.org"})
        assert cont.get(HttpClient).base_url == "https://example.org"

    def test_parameter_is_looked_up_by_name_not_type(self):
        cont = Container({"int": 99, "timeout": 3})
        assert cont.get(HttpClient).timeout == 3

    def test_generic_and_optional_builtins_are_parameters(self):
        class Pool:
            def __init__(self, hosts: list[str], size: int | None):
                self.hosts = hosts
                self.size = size

        cont = Container({"hosts": ["a", "b"], "size": 4})
        pool = cont.get(Pool)
        assert pool.hosts == ["a", "b"]
        assert pool.size == 4

    def test_strict_mode_missing_parameter_raises(self):
        cont = Container(strict_parameters=True)
        with pytest.raises(ContainerError, match="'timeout'"):
            cont.get(HttpClient)

    def test_strict_mode_uses_declared_default(self):
        cont = Container({"timeout": 2}, strict_parameters=True)
        client = cont.get(HttpClient)
        assert client.timeout == 2
        assert client.base_url == "http://localhost"
