"""Tests for save-service resolution."""

from types import SimpleNamespace

import pytest

from jmxroundtrip.exceptions import ServiceResolutionError
from jmxroundtrip.saveservice import XmlSaveService
from jmxroundtrip.service import (
    ENTRY_POINT_GROUP,
    DocumentService,
    load_service,
    resolve_service_factory,
)


def test_module_attribute_target(properties_file):
    service = load_service(
        "jmxroundtrip.saveservice:XmlSaveService",
        {"properties_path": str(properties_file)},
    )

    assert isinstance(service, XmlSaveService)
    assert isinstance(service, DocumentService)


def test_fake_service_satisfies_protocol(fake_service):
    assert isinstance(fake_service, DocumentService)


@pytest.mark.parametrize(
    "target",
    ["no_such_module_for_jmxroundtrip:Service", "jmxroundtrip.saveservice:NoSuchService"],
)
def test_unimportable_target(target):
    with pytest.raises(ServiceResolutionError) as exc_info:
        resolve_service_factory(target)
    assert exc_info.value.error_code == "SERVICE_001"


def test_entry_point_target(mocker):
    entry_point = SimpleNamespace(name="xml", value="jmxroundtrip.saveservice:XmlSaveService", load=lambda: XmlSaveService)
    select = mocker.patch("jmxroundtrip.service._entry_points", return_value=[entry_point])

    assert resolve_service_factory("xml") is XmlSaveService
    select.assert_called_once_with(ENTRY_POINT_GROUP)


def test_unknown_entry_point(mocker):
    mocker.patch("jmxroundtrip.service._entry_points", return_value=[])

    with pytest.raises(ServiceResolutionError) as exc_info:
        load_service("nope")
    assert exc_info.value.error_code == "SERVICE_002"


def test_construction_failure_is_wrapped(tmp_path):
    with pytest.raises(ServiceResolutionError) as exc_info:
        load_service(
            "jmxroundtrip.saveservice:XmlSaveService",
            {"properties_path": str(tmp_path / "missing.properties")},
        )
    assert exc_info.value.error_code == "SERVICE_003"


def test_unexpected_options_are_a_construction_failure(properties_file):
    with pytest.raises(ServiceResolutionError) as exc_info:
        load_service(
            "jmxroundtrip.saveservice:XmlSaveService",
            {"properties_path": str(properties_file), "colour": "blue"},
        )
    assert exc_info.value.error_code == "SERVICE_003"


def test_service_instance_target(fake_service, mocker):
    mocker.patch("jmxroundtrip.service._import_target", return_value=fake_service)

    assert load_service("tests:service") is fake_service
    with pytest.raises(ServiceResolutionError) as exc_info:
        load_service("tests:service", {"strict": True})
    assert exc_info.value.error_code == "SERVICE_003"


def test_non_service_object_is_rejected():
    with pytest.raises(ServiceResolutionError) as exc_info:
        load_service("collections:OrderedDict")
    assert exc_info.value.error_code == "SERVICE_004"
    assert exc_info.value.context["service_type"] == "OrderedDict"
