"""
Static inspection of GLSL source.

The inspector recovers the information that is needed to bind data to a
compiled program: attributes, uniforms (with struct and array uniforms
flattened to their leaf fields), structs and texture registers. It only
understands the subset of declaration syntax that shader blocks produce:
one declaration per line, annotated with comments like::

    // @binding DiffuseMap
    // @filter LinearWrap
    uniform sampler2D uDiffuseMap;

Nothing in here raises on malformed GLSL. Lines that are not understood are
skipped, because the GPU compiler is the final authority on syntax.
"""

import re
import logging

from ..utils.enums import StorageClass
from .preprocess import preprocess


logger = logging.getLogger("shaderblocks")

re_annotation = re.compile(r"^\s*@(\w+)\s*(.*?)\s*$")
re_declaration = re.compile(
    r"^(?:layout\s*\((?P<layout>[^)]*)\)\s*)?"
    r"(?:(?:flat|smooth|noperspective|centroid|invariant)\s+)*"
    r"(?P<qualifier>const|in|out|attribute|uniform|varying|buffer|shared)\s+"
    r"(?P<type>[\w\s\[\]]+?)\s+"
    r"(?P<name>\w+(?:\s*\[[^\]]*\])?)\s*;"
)
re_constant = re.compile(
    r"^const\s+(?P<type>[^=;]+?)\s+(?P<name>\w+)\s*=\s*(?P<value>[^;\s][^;]*?)\s*;"
)
re_whitespace = re.compile(r"\s+")
re_struct = re.compile(r"\bstruct\b")
re_struct_name = re.compile(r"struct\s+(\w+)\s*$")
re_line_comment = re.compile(r"//[^\n]*")
re_block_comment = re.compile(r"/\*.*?\*/", re.DOTALL)
re_member = re.compile(r"(\w+)\s+(\w+)\s*$")
re_array = re.compile(r"^(\w+)\[(.+)\]$")
re_sampler_type = re.compile(
    r"sampler(2D|2DArray|2DArrayShadow|3D|Cube|CubeShadow)|[iu]?sampler(2D|3D|Cube|2DArray)"
)
re_info_log_error = re.compile(r"^\s*(\w+)\s*:\s*(\d+)\s*:\s*(\d+)\s*:")

# Maps a storage qualifier to the bucket that its declarations go in
storage_buckets = {
    StorageClass.const: "constants",
    StorageClass.in_: "inputs",
    StorageClass.out: "outputs",
    StorageClass.attribute: "attributes",
    StorageClass.varying: "varying",
    StorageClass.uniform: "uniforms",
    StorageClass.buffer: "buffers",
    StorageClass.shared: "shared",
}


class ShaderInspection:
    """The result of inspecting a single shader stage.

    Each bucket (``constants``, ``attributes``, ``uniforms``, ``varying``,
    ``inputs``, ``outputs``, ``buffers``, ``shared``) is a dict that maps the
    binding name (or the GLSL name if there is no ``@binding`` annotation)
    to a declaration record. The ``structs`` dict maps struct names to their
    fields, ``defines`` holds the macros that are defined at the end of the
    source, and ``lines`` is the preprocessed source.
    """

    def __init__(self, lines, defines, buckets, structs):
        self.lines = lines
        self.defines = defines
        self.structs = structs
        self.constants = buckets["constants"]
        self.attributes = buckets["attributes"]
        self.uniforms = buckets["uniforms"]
        self.varying = buckets["varying"]
        self.inputs = buckets["inputs"]
        self.outputs = buckets["outputs"]
        self.buffers = buckets["buffers"]
        self.shared = buckets["shared"]

    @property
    def source(self):
        """The preprocessed source as a str."""
        return "\n".join(self.lines)


class ProgramInspection:
    """The merged result of inspecting a vertex and a fragment shader."""

    def __init__(self):
        self.inputs = {}
        self.uniforms = {}
        self.varying = {}
        self.structs = {}
        self.vertex_shader = ""
        self.fragment_shader = ""


def inspect_program(vertex_shader, fragment_shader):
    """Inspect the two stages of a program and merge the results.

    The inputs come from the vertex shader only (attributes and ``in``
    declarations). Uniforms of both stages are merged, where a fragment
    uniform replaces a vertex uniform with the same key.
    """
    result = ProgramInspection()

    if vertex_shader:
        inspection = inspect_shader(vertex_shader)
        result.inputs.update(inspection.attributes)
        result.inputs.update(inspection.inputs)
        result.uniforms.update(inspection.uniforms)
        result.varying.update(inspection.varying)
        result.structs.update(inspection.structs)
        result.vertex_shader = inspection.source

    if fragment_shader:
        inspection = inspect_shader(fragment_shader)
        for key, item in inspection.uniforms.items():
            other = result.uniforms.get(key)
            if other is not None and other["type"] != item["type"]:
                logger.warning(
                    f"Uniform {key!r} is declared as {other['type']} in the vertex shader "
                    f"and as {item['type']} in the fragment shader, using the latter."
                )
        result.uniforms.update(inspection.uniforms)
        result.varying.update(inspection.varying)
        result.structs.update(inspection.structs)
        result.fragment_shader = inspection.source

    return result


def inspect_shader(source):
    """Inspect the source of a single shader stage.

    Runs the preprocessor, collects the top-level declarations and structs,
    flattens struct and array uniforms and assigns texture registers.
    Returns a ``ShaderInspection``.
    """
    lines, defines = preprocess(source)
    buckets = inspect_qualifiers(lines)
    structs = inspect_structs("\n".join(lines))
    uniforms = fixup_uniforms(buckets["uniforms"], structs, defines)
    buckets["uniforms"] = fix_texture_registers(uniforms)
    return ShaderInspection(lines, defines, buckets, structs)


def parse_annotations(comments):
    """Get a dict of annotations from a list of comment strings.

    Comments of the form ``@key value`` produce an entry, others are ignored.
    """
    annotations = {}
    for comment in comments:
        match = re_annotation.match(comment)
        if match:
            annotations[match.group(1)] = match.group(2)
    return annotations


def inspect_qualifiers(lines):
    """Collect the top-level declarations in the given lines.

    Returns a dict that maps bucket names to dicts of declaration records.
    """
    buckets = {name: {} for name in storage_buckets.values()}
    comments = []

    for line in lines:
        line = line.strip()
        if not line:
            comments = []
            continue

        if line.startswith("//"):
            comments.append(line[2:])
            continue

        line = line.split("//", 1)[0].strip()

        match = re_constant.match(line)
        if match:
            name = match.group("name")
            buckets["constants"][name] = {
                "name": name,
                "type": match.group("type"),
                "value": match.group("value"),
            }
            comments = []
            continue

        match = re_declaration.match(line)
        if match:
            record = parse_annotations(comments)
            record["name"] = re_whitespace.sub("", match.group("name"))
            record["type"] = match.group("type")
            if match.group("layout") is not None:
                record["layout"] = match.group("layout").strip()
            bucket = buckets[storage_buckets[match.group("qualifier")]]
            bucket[record.get("binding") or record["name"]] = record

        comments = []

    return buckets


def inspect_structs(source):
    """Find the struct definitions in the given source.

    Returns a dict that maps struct names to a dict of fields, where each
    field is a dict with ``name`` and ``type``. Nested braces are not
    supported.
    """
    source = re_block_comment.sub("", source)
    source = re_line_comment.sub("", source)
    structs = {}
    index = 0
    while True:
        match = re_struct.search(source, index)
        if not match:
            break
        index = match.start()
        left = source.find("{", index)
        right = source.find("};", index)
        if left < 0 or right < 0:
            break
        if right < left:
            index = match.end()
            continue

        name_match = re_struct_name.match(source[index:left])
        if not name_match:
            # Another 'struct' may sit between this one and the brace
            index = match.end()
            continue
        structs[name_match.group(1)] = inspect_members(source[left + 1 : right])
        index = right + 2

    return structs


def inspect_members(block):
    """Parse the body of a struct into a dict of fields."""
    block = re_block_comment.sub("", block)
    block = re_line_comment.sub("", block)
    fields = {}
    for expression in block.split(";"):
        match = re_member.search(expression.strip())
        if match:
            type, name = match.group(1), match.group(2)
            fields[name] = {"name": name, "type": type}
    return fields


def fixup_uniforms(uniforms, structs, defines):
    """Flatten struct and array uniforms.

    Returns a new dict in which every uniform that is an array, a struct,
    or an array of structs is replaced by one entry per element and leaf
    field. Other uniforms are passed unchanged.
    """
    result = {}

    for key, item in uniforms.items():
        match = re_array.match(item["name"])
        if not match and item["type"] not in structs:
            result[key] = item
            continue

        if match:
            name, count_text = match.group(1), match.group(2)
            binding = item.get("binding") or name
            count = resolve_array_count(count_text, defines)
            for i in range(count):
                _flatten(result, f"{binding}{i}", f"{name}[{i}]", item["type"], structs)
        else:
            binding = item.get("binding") or item["name"]
            _flatten(result, binding, item["name"], item["type"], structs)

    return result


def _flatten(result, binding, name, type, structs, seen=()):
    struct = structs.get(type)
    if struct is None or type in seen:
        result[binding] = {"name": name, "binding": binding, "type": type}
        return
    for field in struct.values():
        _flatten(
            result,
            binding + field["name"],
            f"{name}.{field['name']}",
            field["type"],
            structs,
            seen + (type,),
        )


def resolve_array_count(text, defines):
    """Get the element count of an array declaration.

    The count can be a number or the name of a macro (which may refer to
    another macro). Returns 0 if the count cannot be resolved.
    """
    seen = set()
    while text in defines and text not in seen:
        seen.add(text)
        value = defines[text]
        if value is None:
            break
        text = value.strip()
    try:
        count = int(text)
    except ValueError:
        logger.warning(f"Cannot resolve array size {text!r}, skipping uniform.")
        return 0
    return max(count, 0)


def _parse_register(value):
    if isinstance(value, bool) or value is None:
        return None
    value = str(value).strip()
    return int(value) if value.isdecimal() else None


def fix_texture_registers(uniforms):
    """Assign a texture register to each sampler uniform.

    Samplers with a valid ``register`` annotation keep it. The others get
    the lowest free register, in order of appearance. Returns a new dict.
    """
    result = {key: dict(item) for key, item in uniforms.items()}
    reserved = set()
    delayed = []

    for key, item in result.items():
        if not re_sampler_type.search(item.get("type", "")):
            continue
        register = _parse_register(item.get("register"))
        if register is None:
            delayed.append(item)
        elif register in reserved:
            logger.warning(
                f"Texture register {register} of {key!r} is already in use, reassigning."
            )
            delayed.append(item)
        else:
            reserved.add(register)
            item["register"] = register

    for item in delayed:
        register = 0
        while register in reserved:
            register += 1
        reserved.add(register)
        item["register"] = register

    return result


def format_info_log(log, source):
    """Annotate a GPU compiler info log with the offending source lines.

    For each log line like ``ERROR: 0:12: 'foo' : syntax error``, the source
    lines around line 12 are appended, with the line itself marked by ``>``.
    The printed line numbers are 1-based, like the ones in the log.
    """
    if not log:
        return ""
    source_lines = source.split("\n")
    result = []
    for line in log.split("\n"):
        result.append(line)
        match = re_info_log_error.match(line)
        if not match:
            continue
        linenr = int(match.group(3)) - 1
        for i in range(max(linenr - 10, 0), min(linenr + 10, len(source_lines))):
            prefix = str(i + 1).rjust(5)
            if i == linenr:
                prefix = ">" + prefix[1:]
            result.append(f"{prefix}:  {source_lines[i]}")
    return "\n".join(result)
