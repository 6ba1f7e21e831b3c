from shaderblocks.utils import ReadOnlyDict, hash_from_value
from pytest import raises


def test_hash_from_value_equal():
    d1 = ReadOnlyDict(foo=("a", "b"), bar=("c",))
    d2 = ReadOnlyDict(bar=("c",), foo=("a", "b"))

    assert hash_from_value([d1, {"X": True}]) == hash_from_value([d2, {"X": True}])

    # Tuples and lists encode the same
    assert hash_from_value(("a", "b")) == hash_from_value(["a", "b"])

    # Key order does not matter for plain dicts either
    assert hash_from_value({"a": 1, "b": 2}) == hash_from_value({"b": 2, "a": 1})


def test_hash_from_value_differ():
    ref = hash_from_value({"LIGHT_COUNT": 4})
    assert hash_from_value({"LIGHT_COUNT": 3}) != ref
    assert hash_from_value({"LIGHT_COUNT": "4"}) != ref
    assert hash_from_value({"LIGHTS": 4}) != ref


def test_hash_from_value_unsupported():
    class Foo:
        pass

    with raises(TypeError):
        hash_from_value({"foo": Foo()})


if __name__ == "__main__":
    test_hash_from_value_equal()
    test_hash_from_value_differ()
    test_hash_from_value_unsupported()
