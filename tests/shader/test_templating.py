from shaderblocks.shader.templating import (
    register_glsl_loader,
    apply_templating,
    load_template,
)
from pytest import raises


def test_register_glsl_loader_fails():
    # Context must be a str
    with raises(TypeError):
        register_glsl_loader(None, {})
    with raises(TypeError):
        register_glsl_loader(42, {})
    # Context cannot have a dot
    with raises(TypeError):
        register_glsl_loader("my.context", {})
    # Loader cannot be anything
    with raises(TypeError):
        register_glsl_loader("mycontext", 42)
    # Builtin context is taken
    with raises(RuntimeError):
        register_glsl_loader("shaderblocks", {})


def test_register_glsl_loader_dict():
    register_glsl_loader(
        "testdict",
        {
            "base.glsl": "x = {{ value }};\n",
            "main.glsl": "{$ include 'testdict.base.glsl' $}",
        },
    )

    assert load_template("testdict.base.glsl", value=3) == "x = 3;\n"
    assert load_template("testdict.main.glsl", value=4).strip() == "x = 4;"

    # Cannot register twice
    with raises(RuntimeError):
        register_glsl_loader("testdict", {})


def test_register_glsl_loader_function():
    def loader(name):
        return f"// loaded {name}"

    register_glsl_loader("testfunc", loader)
    assert load_template("testfunc.foo.glsl") == "// loaded foo.glsl"


def test_apply_templating():
    assert apply_templating("x = {{ value }};", value=1) == "x = 1;"

    code = "$$ if flag\nyes\n$$ endif\n"
    assert apply_templating(code, flag=True).strip() == "yes"
    assert apply_templating(code, flag=False).strip() == ""

    with raises(ValueError):
        apply_templating("x = {{ missing }};")


def test_load_builtin_templates():
    vs = load_template("shaderblocks.program.vert.glsl", version="300 es")
    assert vs.startswith("#version 300 es\n")
    assert "#pragma block:attributes" in vs
    assert "  #pragma block:vs_position" in vs

    fs = load_template("shaderblocks.program.frag.glsl")
    assert "#version" not in fs
    assert fs.startswith("precision highp float;")
    assert "#pragma block:attributes" not in fs
    assert "  #pragma block:fs_shade" in fs


def test_load_template_fails():
    with raises(ValueError):
        load_template("shaderblocks.does_not_exist.glsl")
    with raises(ValueError):
        load_template("nosuchcontext.program.vert.glsl")


if __name__ == "__main__":
    test_register_glsl_loader_fails()
    test_register_glsl_loader_dict()
    test_register_glsl_loader_function()
    test_apply_templating()
    test_load_builtin_templates()
    test_load_template_fails()
