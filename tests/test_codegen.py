"""Tests for C# source rendering."""

from __future__ import annotations

import pytest

from openapi_to_csharp_generator.codegen import (
    csharp_string_literal,
    http_method_expression,
    render_api_version,
    render_client,
    render_model,
    render_root_client,
    xml_doc_text,
)
from openapi_to_csharp_generator.generator import AssembledSdk
from openapi_to_csharp_generator.model_types import ApiVersionRecord

from .fixture_helpers import build_sdk_from_yaml, fixture_path


@pytest.fixture(scope="module")
def petstore() -> AssembledSdk:
    return build_sdk_from_yaml(fixture_path("petstore.yaml").read_text(encoding="utf-8"))


def _model_source(sdk: AssembledSdk, name: str) -> str:
    model = next(model for model in sdk.models if model.name == name)
    return render_model(model, namespace="Acme.Sdk")


def test_string_literal_escaping() -> None:
    """Quotes, backslashes and control characters are escaped."""
    assert csharp_string_literal('a"b\\c\n') == '"a\\"b\\\\c\\n"'


def test_xml_doc_escaping() -> None:
    """Markup characters in descriptions cannot break doc comments."""
    assert xml_doc_text("a < b & c > d") == "a &lt; b &amp; c &gt; d"
    assert xml_doc_text(None) == ""


@pytest.mark.parametrize(
    ("method", "expected"),
    [("Get", "HttpMethod.Get"), ("Delete", "HttpMethod.Delete"), ("Patch", 'new HttpMethod("PATCH")')],
)
def test_http_method_expression(method: str, expected: str) -> None:
    """PATCH has no static property on older runtimes and is constructed."""
    assert http_method_expression(method) == expected


def test_class_model_rendering(petstore: AssembledSdk) -> None:
    """Properties carry wire names, nullable markers and initializers."""
    source = _model_source(petstore, "Pet")
    assert "namespace Acme.Sdk.Models;" in source
    assert "/// A pet in the store." in source
    assert "public sealed partial class Pet" in source
    assert '[JsonPropertyName("birth_date")]' in source
    assert "public DateTime? BirthDate { get; set; }" in source
    assert "public string Name { get; set; } = default!;" in source
    assert "public long Id { get; set; }\n" in source
    assert "public PetStatus Status { get; set; }\n" in source
    assert "public IDictionary<string, string>? Attributes { get; set; }" in source
    assert "using System.Collections.Generic;" in source
    assert "using System.Text.Json;\n" not in source
    assert "ToString" not in source


def test_error_model_renders_to_string(petstore: AssembledSdk) -> None:
    """Error payload models serialize themselves for exception messages."""
    source = _model_source(petstore, "Error")
    assert "public override string ToString() => JsonSerializer.Serialize(this);" in source
    assert "using System.Text.Json;" in source


def test_extension_data_rendering(petstore: AssembledSdk) -> None:
    """Open objects expose their unknown members."""
    source = _model_source(petstore, "Metadata")
    assert "[JsonExtensionData]" in source
    assert "public IDictionary<string, JsonElement>? AdditionalProperties { get; set; }" in source


def test_enum_rendering(petstore: AssembledSdk) -> None:
    """Enum members keep their wire values."""
    source = _model_source(petstore, "PetStatus")
    assert "public enum PetStatus" in source
    assert '[EnumMember(Value = "available")]\n    Available,' in source
    assert source.count("[EnumMember") == 3


def test_client_rendering(petstore: AssembledSdk) -> None:
    """Methods build requests through the shared transport."""
    pets = next(client for client in petstore.clients if client.name == "Pets")
    source = render_client(pets, namespace="Acme.Sdk")
    assert "public sealed partial class PetsClient" in source
    assert (
        "public Task<ApiResponse<PetsListPetsResponse>> ListPetsAsync("
        "int? limit = null, PetStatus? status = null, Guid? xRequestId = null, "
        "RequestOptions? requestOptions = null, CancellationToken cancellationToken = default)"
    ) in source
    assert 'builder.AddQuery("limit", limit);' in source
    assert 'builder.AddHeader("X-Request-Id", xRequestId);' in source
    assert 'builder.AddPath("petId", petId);' in source
    assert 'var request = _client.CreateRequest(HttpMethod.Delete, "/pets/{petId}", builder =>' in source
    assert (
        'return _client.SendAsync<Pet>(request, body, "application/json", requestOptions, '
        "cancellationToken);"
    ) in source
    assert "Status 404; the payload is <see cref=\"Error\"/>." in source
    assert "public Task<ApiResponse<object>> RemovePetAsync(" in source


def test_client_without_parameters_passes_no_builder(petstore: AssembledSdk) -> None:
    """Operations with no arguments skip the request builder."""
    core = next(client for client in petstore.clients if client.name == "Core")
    source = render_client(core, namespace="Acme.Sdk")
    assert 'var request = _client.CreateRequest(HttpMethod.Get, "/health", null);' in source
    assert "public Task<ApiResponse<string>> GetHealthAsync(" in source
    assert "using System.Collections.Generic;" not in source


def test_root_client_rendering(petstore: AssembledSdk) -> None:
    """The root client exposes one property per tag client."""
    source = render_root_client(petstore.root)
    assert "public partial class SdkClient" in source
    assert "public PetsClient Pets { get; private set; } = default!;" in source
    assert "Core = new CoreClient(apiClient);" in source
    assert "partial void InitializeGeneratedClients(ApiClient apiClient)" in source


def test_api_version_rendering() -> None:
    """The document version becomes a constant."""
    source = render_api_version(ApiVersionRecord(namespace="Acme.Sdk", api_version="2.4.0"))
    assert "namespace Acme.Sdk.Http;" in source
    assert 'public const string Value = "2.4.0";' in source
    assert source.endswith("}\n")
