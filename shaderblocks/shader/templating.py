import jinja2

root_loader = jinja2.PrefixLoader({}, delimiter=".")

jinja_env = jinja2.Environment(
    block_start_string="{$",
    block_end_string="$}",
    variable_start_string="{{",
    variable_end_string="}}",
    line_statement_prefix="$$",
    undefined=jinja2.StrictUndefined,
    loader=root_loader,
    keep_trailing_newline=True,
)


def register_glsl_loader(context, loader):
    """Register a source for base templates and shader snippets.

    A template named ``'some_context.name.glsl'`` is loaded with the loader
    that is registered for "some_context". This also applies to includes::

       {$ include 'some_context.name.glsl' $}

    This function allows registering a loader for your downstream package or application.

    Parameters
    ----------
    context : str
        The context of the loader.
    loader: jinja2.BaseLoader | callable | dict
        The loader to use for this context. If a function is given, it must accept one
        positional argument (the name to include).
    """
    if not (isinstance(context, str) and "." not in context):
        raise TypeError("Glsl load context must be a string without dots.")
    if context in root_loader.mapping:
        raise RuntimeError(f"A loader is already registered for '{context}'.")
    if isinstance(loader, jinja2.BaseLoader):
        root_loader.mapping[context] = loader
    elif isinstance(loader, dict):
        root_loader.mapping[context] = jinja2.DictLoader(loader)
    elif callable(loader):
        root_loader.mapping[context] = jinja2.FunctionLoader(loader)
    else:
        raise TypeError(
            f"The given glsl loader must be a jinja2.BaseLoader, function, or dict. Not {loader!r}"
        )


register_glsl_loader("shaderblocks", jinja2.PackageLoader("shaderblocks.glsl", "."))


def apply_templating(code, **kwargs):
    """Render the given (jinja2-templated) code with the given variables."""
    t = jinja_env.from_string(code)
    try:
        return t.render(**kwargs)
    except jinja2.UndefinedError as err:
        raise ValueError(f"Cannot compose shader: {err.args[0]}") from None


def load_template(name, **kwargs):
    """Load a registered template by name, e.g. ``'shaderblocks.program.vert.glsl'``, and render it."""
    try:
        t = jinja_env.get_template(name)
    except jinja2.TemplateNotFound:
        raise ValueError(f"Cannot find shader template {name!r}") from None
    try:
        return t.render(**kwargs)
    except jinja2.UndefinedError as err:
        raise ValueError(f"Cannot compose shader: {err.args[0]}") from None
