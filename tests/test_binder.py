from oas_runtime.binder import bind_parameters, substitute_path
from oas_runtime.models import ParameterDef, ParameterLocation


def _param(name, location, **kwargs):
    return ParameterDef(name=name, location=ParameterLocation(location), **kwargs)


def test_values_are_placed_by_location():
    parameters = [
        _param("a", "query"),
        _param("h", "header"),
        _param("f", "formData"),
        _param("b", "query"),
    ]
    bound = bind_parameters(parameters, {"a": 1, "b": 2, "h": "x", "f": "y"})

    assert bound.query == [("a", 1), ("b", 2)]
    assert bound.headers == [("h", "x")]
    assert bound.form == [("f", "y")]
    assert not bound.has_json_body
    assert not bound.has_file_body
    assert bound.errors == []


def test_missing_required_input_is_reported():
    bound = bind_parameters([_param("q", "query", required=True)], {})

    assert bound.errors == [{"message": "Missing input: q", "path": "/q"}]
    assert bound.query == []


def test_missing_optional_input_is_skipped():
    bound = bind_parameters([_param("q", "query")], {"q": None})

    assert bound.errors == []
    assert bound.query == []


def test_default_fills_missing_value():
    bound = bind_parameters([_param("sort", "query", default="name", required=True)], {})

    assert bound.query == [("sort", "name")]
    assert bound.errors == []


def test_last_body_parameter_wins():
    parameters = [_param("first", "body"), _param("second", "body")]
    bound = bind_parameters(parameters, {"first": {"a": 1}, "second": {"b": 2}})

    assert bound.json_body == {"b": 2}


def test_falsy_body_is_still_bound():
    bound = bind_parameters([_param("count", "body")], {"count": 0})

    assert bound.has_json_body
    assert bound.json_body == 0


def test_file_parameter_replaces_payload():
    bound = bind_parameters([_param("photo", "file")], {"photo": b"\x89PNG"})

    assert bound.file_body == b"\x89PNG"


def test_path_parameters_are_left_to_path_substitution():
    bound = bind_parameters([_param("petId", "path", required=True)], {})

    assert bound.errors == []


def test_substitute_path():
    segments, errors = substitute_path(["pets", "{petId}", "v{version}.json"], {"petId": 7, "version": True})

    assert segments == ["pets", "7", "vtrue.json"]
    assert errors == []


def test_substitute_path_reports_missing_placeholders():
    segments, errors = substitute_path(["pets", "{petId}"], {})

    assert segments == ["pets", ""]
    assert errors == [{"message": "Missing input: petId", "path": "/petId"}]
