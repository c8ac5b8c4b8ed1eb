import unittest

import pytest
from sample_services import Clock, LogSink

from wirebox import Container, ContainerError, NotFoundError


class TestMappingAccess(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_setitem_registers_transient_binding(self):
        self.cont["sink"] = lambda _: LogSink()
        assert isinstance(self.cont["sink"], LogSink)
        assert self.cont["sink"] is not self.cont["sink"]

    def test_getitem_autowires_classes(self):
        assert isinstance(self.cont[Clock], Clock)

    def test_contains_delegates_to_has(self):
        assert "sink" not in self.cont
        self.cont["sink"] = lambda _: LogSink()
        assert "sink" in self.cont
        assert Clock in self.cont

    def test_delitem_unsets(self):
        self.cont.singleton("sink", lambda _: LogSink())
        self.cont["sink"]
        del self.cont["sink"]
        assert "sink" not in self.cont
        with pytest.raises(NotFoundError):
            self.cont["sink"]

    def test_delitem_missing_is_noop(self):
        del self.cont["missing"]


class TestCallByName(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_call_dispatches_to_public_method(self):
        self.cont.call("set_parameter", "timeout", 30)
        assert self.cont.call("get_parameter", "timeout") == 30

    def test_call_passes_keyword_arguments(self):
        self.cont.call("set", "sink", lambda _: LogSink(), singleton=True)
        assert self.cont.get("sink") is self.cont.get("sink")

    def test_call_unknown_method_raises(self):
        with pytest.raises(ContainerError, match="'resolve'"):
            self.cont.call("resolve", "sink")

    def test_call_private_method_raises(self):
        with pytest.raises(ContainerError, match="'_autowire'"):
            self.cont.call("_autowire", Clock, "x")

    def test_call_attribute_that_is_not_a_method_raises(self):
        with pytest.raises(ContainerError):
            self.cont.call("strict_parameters")
