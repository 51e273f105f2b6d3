import pytest

from spec_tools.shared.naming import (
    NamingConvention,
    pluralize,
    split_into_words,
    to_camel_case,
    to_header_property_name,
    to_identifier,
    to_pascal_case,
)


class TestSplitIntoWords:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("myPetStore", ("My", "Pet", "Store")),
            ("my-pet-store", ("My", "Pet", "Store")),
            ("my.pet_store now", ("My", "Pet", "Store", "Now")),
            ("XMLParser", ("Xml", "Parser")),
            ("getHTTPResponse", ("Get", "Http", "Response")),
            ("version2Api", ("Version2", "Api")),
            ("v2Beta", ("V2", "Beta")),
            ("--a--", ("A",)),
            ("", ()),
            ("---", ()),
        ],
    )
    def test_split_into_words(self, raw, expected):
        assert split_into_words(raw) == expected

    def test_acronyms_are_flattened(self):
        assert split_into_words("API") == ("Api",)


class TestToIdentifier:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("myPetStore", "MyPetStore"),
            ("my-pet-store", "MyPetStore"),
            ("my.pet-store", "MyPetStore"),
            ("my-PET.store", "MyPetStore"),
            ("XMLParser", "XmlParser"),
            ("pet_id", "PetId"),
            ("", ""),
        ],
    )
    def test_pascal_case(self, raw, expected):
        assert to_identifier(raw, NamingConvention.PASCAL_CASE) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("my-pet-store", "myPetStore"),
            ("XMLParser", "xmlParser"),
            ("PetId", "petId"),
            ("", ""),
        ],
    )
    def test_camel_case(self, raw, expected):
        assert to_identifier(raw, NamingConvention.CAMEL_CASE) == expected

    def test_original_returns_input_unchanged(self):
        assert to_identifier("my-PET.store", NamingConvention.ORIGINAL) == "my-PET.store"

    def test_default_convention_is_pascal_case(self):
        assert to_identifier("pet-store") == "PetStore"

    @pytest.mark.parametrize(
        "raw",
        [
            "myPetStore",
            "my-pet-store",
            "my.pet-store",
            "my-PET.store",
            "XMLParser",
            "HTTP2Server",
            "user_account id",
            "already.PascalCase",
            "order-items-v2",
        ],
    )
    def test_idempotent(self, raw):
        once = to_identifier(raw, NamingConvention.PASCAL_CASE)
        assert to_identifier(once, NamingConvention.PASCAL_CASE) == once

    def test_single_letter_words_collapse_on_second_pass(self):
        once = to_identifier("a_b_c")
        assert once == "ABC"
        assert to_identifier(once) == "Abc"
        assert to_identifier("Abc") == "Abc"

    def test_deterministic(self):
        assert to_identifier("x-Rate-LIMIT") == to_identifier("x-Rate-LIMIT") == "XRateLimit"

    def test_wrappers(self):
        assert to_pascal_case("hello_world") == "HelloWorld"
        assert to_camel_case("hello_world") == "helloWorld"


class TestToHeaderPropertyName:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("x-continuation", "Continuation"),
            ("x-correlation-id", "CorrelationId"),
            ("X-Request-ID", "RequestId"),
            ("Content-Type", "ContentType"),
            ("xylophone", "Xylophone"),
        ],
    )
    def test_header_property_name(self, header, expected):
        assert to_header_property_name(header) == expected


class TestPluralize:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("category", "categories"),
            ("box", "boxes"),
            ("leaf", "leaves"),
            ("knife", "knives"),
            ("cat", "cats"),
            ("cats", "cats"),
            ("boxes", "boxes"),
            ("day", "days"),
            ("church", "churches"),
            ("dish", "dishes"),
            ("quiz", "quizes"),
            ("Category", "Categories"),
            ("", ""),
        ],
    )
    def test_pluralize(self, word, expected):
        assert pluralize(word) == expected
