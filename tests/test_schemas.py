import importlib.util
import warnings

from pydantic.warnings import PydanticDeprecatedSince20

from backend import schemas


def test_schemas_module_defines_models_without_deprecated_config():
    # load a private copy so the app's own schema classes stay untouched
    spec = importlib.util.spec_from_file_location("_schemas_copy", schemas.__file__)
    module = importlib.util.module_from_spec(spec)
    with warnings.catch_warnings():
        warnings.simplefilter("error", PydanticDeprecatedSince20)
        spec.loader.exec_module(module)
    assert module.RequestModel.model_config["alias_generator"] is not None


def test_request_models_inherit_camel_config_and_strip_whitespace():
    body = schemas.SubjectCreate.model_validate({"yearId": 3, "subjectName": "  Algorithms  "})
    assert body.year_id == 3
    assert body.subject_name == "Algorithms"

    by_field_name = schemas.SubjectCreate.model_validate({"year_id": 3, "subject_name": "Algorithms"})
    assert by_field_name.subject_name == "Algorithms"


def test_serialize_reads_attributes_and_emits_camel_case():
    class Row:
        year_id = 1
        subject_name = "Optics"

    assert schemas.serialize(schemas.SubjectCreate, Row()) == {"yearId": 1, "subjectName": "Optics"}
