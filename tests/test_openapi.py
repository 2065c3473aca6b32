import asyncio
import json

import httpx
import pytest

from oas_runtime.errors import SpecError
from oas_runtime.models import ParameterLocation
from oas_runtime.openapi import SpecLoader, extract_operations, load_spec_file, parse_specification


def test_extract_operations_skips_relative_paths_and_extension_keys(petstore):
    operations = extract_operations(petstore)

    assert set(operations) == {
        "listPets",
        "addPet",
        "showPetById",
        "updatePet",
        "uploadPhoto",
        "search",
        "get_status",
    }


def test_extract_operations_uppercases_method_and_splits_path(petstore):
    operation = extract_operations(petstore)["uploadPhoto"]

    assert operation.method == "POST"
    assert operation.path_segments == ("pets", "{petId}", "photo")
    assert operation.path == "/pets/{petId}/photo"


def test_shared_path_parameters_are_merged(petstore):
    operation = extract_operations(petstore)["updatePet"]

    assert [p.name for p in operation.parameters] == ["petId", "name", "status"]
    assert operation.parameters[0].location is ParameterLocation.PATH
    assert operation.parameters[0].required is True


def test_unknown_parameter_locations_are_dropped(petstore):
    operation = extract_operations(petstore)["search"]

    assert [p.name for p in operation.parameters] == ["q"]


def test_defaults_are_kept(petstore):
    sort = extract_operations(petstore)["listPets"].parameters[1]

    assert sort.has_default
    assert sort.default == "name"
    assert not extract_operations(petstore)["listPets"].parameters[0].has_default


def test_parse_specification_strips_trailing_slash(petstore):
    spec = parse_specification(petstore)

    assert spec.base_path == "http://api.test/v1"


def test_parse_specification_resolves_relative_base_path_against_origin():
    spec = parse_specification({"basePath": "/api", "paths": {}}, origin="http://host.test/spec.json")

    assert spec.base_path == "http://host.test/api"


def test_load_spec_parses_json_and_caches():
    calls = []

    def respond(request):
        calls.append(request)
        return httpx.Response(200, text=json.dumps({"basePath": "/v1", "paths": {}}))

    async def run():
        loader = SpecLoader()
        async with httpx.AsyncClient(transport=httpx.MockTransport(respond)) as client:
            first = await loader.load_spec("http://host.test/spec.json", client=client)
            second = await loader.load_spec("http://host.test/spec.json", client=client)
        return first, second

    first, second = asyncio.run(run())
    assert first == {"basePath": "/v1", "paths": {}}
    assert second is first
    assert len(calls) == 1


def test_load_spec_non_json_body_yields_empty_spec():
    async def run():
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html/>"))
        async with httpx.AsyncClient(transport=transport) as client:
            return await SpecLoader().load_spec("http://host.test/spec", client=client)

    assert asyncio.run(run()) == {}


def test_load_spec_raises_on_error_status():
    async def run():
        transport = httpx.MockTransport(lambda request: httpx.Response(404, text="nope"))
        async with httpx.AsyncClient(transport=transport) as client:
            await SpecLoader().load_spec("http://host.test/spec", client=client)

    with pytest.raises(SpecError) as excinfo:
        asyncio.run(run())
    assert excinfo.value.status == 404


def test_load_spec_file(tmp_path, petstore):
    path = tmp_path / "spec.json"
    path.write_text(json.dumps(petstore), encoding="utf-8")

    assert load_spec_file(path) == petstore

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SpecError):
        load_spec_file(bad)
