import pytest

from seaplanecli.domain.errors import InsecureUrlRejected, InvalidTargetShape
from seaplanecli.domain.models.identity import Credential
from seaplanecli.domain.models.request import DangerZoneFeatures, RequestShape, TransportOptions
from seaplanecli.infrastructure.api.locks import LocksFamily
from seaplanecli.infrastructure.api.metadata import METADATA_API_URL, MetadataFamily
from seaplanecli.infrastructure.api.request_builder import RequestBuilder
from seaplanecli.infrastructure.api.restrict import RestrictFamily

CREDENTIAL = Credential(token="tok-1")
NO_DANGER_ZONE = DangerZoneFeatures(allow_insecure_urls=False, allow_invalid_certs=False)


def _restrict(api=None, directory=None, from_api=None, from_dir=None):
    return {"api": api, "directory": directory, "from_api": from_api, "from_dir": from_dir}


@pytest.fixture
def restrict_builder():
    return RequestBuilder(RestrictFamily(), features=DangerZoneFeatures())


@pytest.mark.parametrize("params, shape, url", [
    (_restrict("config", "Zm9v"), RequestShape.SINGLE, "https://metadata.cplane.cloud/v1/restrict/config/base64:Zm9v/"),
    (_restrict("config"), RequestShape.COLLECTION, "https://metadata.cplane.cloud/v1/restrict/config/"),
    (_restrict(), RequestShape.GLOBAL_RANGE, "https://metadata.cplane.cloud/v1/restrict/"),
])
def test_restrict_shapes(restrict_builder, params, shape, url):
    bound = restrict_builder.build(params, CREDENTIAL)
    assert bound.shape is shape
    assert bound.url == url


@pytest.mark.parametrize("params", [
    _restrict(directory="Zm9v"),
    _restrict(directory="Zm9v", from_dir="YQ"),
    _restrict("config", "Zm9v", from_dir="YQ"),
    _restrict("config", "Zm9v", from_api="locks"),
    _restrict("config", from_api="locks"),
])
def test_restrict_invalid_combinations_fail_closed(restrict_builder, params):
    with pytest.raises(InvalidTargetShape) as exc_info:
        restrict_builder.build(params, CREDENTIAL)
    assert exc_info.value.family == "restrict"


def test_restrict_range_cursors_become_query(restrict_builder):
    collection = restrict_builder.build(_restrict("config", from_dir="YQ"), CREDENTIAL)
    assert collection.params == {"from": "base64:YQ"}

    global_range = restrict_builder.build(_restrict(from_api="config", from_dir="YQ"), CREDENTIAL)
    assert global_range.params == {"from_api": "config", "from": "base64:YQ"}

    assert restrict_builder.build(_restrict(), CREDENTIAL).params == {}


@pytest.mark.parametrize("params, shape, path", [
    ({"key": "Zm9v"}, RequestShape.SINGLE, "v1/config/base64:Zm9v"),
    ({"directory": "ZGly"}, RequestShape.COLLECTION, "v1/config/base64:ZGly/"),
    ({"directory": "ZGly", "from": "YQ"}, RequestShape.COLLECTION, "v1/config/base64:ZGly/"),
    ({}, RequestShape.GLOBAL_RANGE, "v1/config/"),
    ({"from": "YQ"}, RequestShape.GLOBAL_RANGE, "v1/config/"),
])
def test_metadata_shapes(params, shape, path):
    bound = RequestBuilder(MetadataFamily()).build(params, CREDENTIAL)
    assert bound.shape is shape
    assert bound.url == METADATA_API_URL + path


@pytest.mark.parametrize("params", [{"key": "Zm9v", "directory": "ZGly"}, {"key": "Zm9v", "from": "YQ"}])
def test_metadata_key_excludes_range_parameters(params):
    with pytest.raises(InvalidTargetShape):
        RequestBuilder(MetadataFamily()).build(params, CREDENTIAL)


def test_locks_single_shape_keeps_name_for_responses():
    bound = RequestBuilder(LocksFamily()).build({"name": "bG9jaw"}, CREDENTIAL, base_url="https://locks.test")
    assert bound.url == "https://locks.test/v1/locks/base64:bG9jaw"
    assert bound.target("name") == "bG9jaw"
    assert bound.target("directory") is None


def test_builder_binds_current_credential_token(restrict_builder):
    first = restrict_builder.build(_restrict("config", "Zm9v"), Credential(token="old"))
    second = restrict_builder.build(_restrict("config", "Zm9v"), Credential(token="new"))
    assert first.headers() == {"Authorization": "Bearer old"}
    assert second.headers() == {"Authorization": "Bearer new"}


def test_plain_http_base_url_is_rejected_by_default(restrict_builder):
    with pytest.raises(InsecureUrlRejected):
        restrict_builder.build(_restrict(), CREDENTIAL, base_url="http://metadata.test/")


def test_plain_http_allowed_when_opted_in(restrict_builder):
    bound = restrict_builder.build(
        _restrict(), CREDENTIAL,
        base_url="http://metadata.test/",
        transport=TransportOptions(allow_insecure_transport=True),
    )
    assert bound.url == "http://metadata.test/v1/restrict/"
    assert bound.transport.allow_insecure_transport


def test_danger_zone_gated_off_forces_tls():
    builder = RequestBuilder(RestrictFamily(), features=NO_DANGER_ZONE)
    transport = TransportOptions(allow_insecure_transport=True, allow_invalid_certificates=True)

    with pytest.raises(InsecureUrlRejected):
        builder.build(_restrict(), CREDENTIAL, base_url="http://metadata.test/", transport=transport)

    bound = builder.build(_restrict(), CREDENTIAL, transport=transport)
    assert bound.transport == TransportOptions()
