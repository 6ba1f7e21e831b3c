from shaderblocks.utils.enums import Enum, StorageClass
from pytest import raises


def test_enums():
    class MyOption(Enum):
        auto = "auto"  # fields map to str or int
        some_attr = "some-attr"  # glsl-style values
        foo = None  # value is the same as the key, most-used in shaderblocks

    # Use dir() to get an (alphabetic) list of keys / options.
    assert dir(MyOption) == ["auto", "foo", "some_attr"]

    # Iterate over the object to get a list of values, in original order.
    assert list(MyOption) == ["auto", "some-attr", "foo"]

    # Attribute and map-like lookups are supported
    assert MyOption.some_attr == "some-attr"
    assert MyOption["some_attr"] == "some-attr"

    # Enums are 'immutable'
    with raises(RuntimeError):
        MyOption.auto = "foo"


def test_storage_class():
    # The values are the GLSL keywords
    assert list(StorageClass) == [
        "const",
        "in",
        "out",
        "attribute",
        "varying",
        "uniform",
        "buffer",
        "shared",
    ]

    # The 'in' keyword is a Python keyword, so the key gets an underscore
    assert StorageClass.in_ == "in"
    assert StorageClass["in_"] == "in"
    assert StorageClass.uniform == "uniform"


if __name__ == "__main__":
    test_enums()
    test_storage_class()
