from preload_mock.services.purify import assemble_preload_bundle, purify_bundle


def test_removes_commonjs_plumbing():
    code = """
Object.defineProperties(exports, {
  someProp: { value: 'test' }
});

module.exports = someModule;

exports.otherProp = 'other value';

exports.default = DefaultExport;
"""
    result = purify_bundle(code)

    assert "Object.defineProperties(exports, {" not in result.code
    assert "module.exports = someModule" not in result.code
    assert "exports.otherProp = 'other value'" not in result.code
    assert "const otherProp = 'other value';" in result.code
    assert "Object.assign(window, DefaultExport);" in result.code
    assert result.has_default_export is True


def test_without_default_export():
    result = purify_bundle("exports.someProp = 'value';\n")

    assert "exports.someProp =" not in result.code
    assert result.code == "const someProp = 'value';\n"
    assert result.has_default_export is False


def test_exact_output_for_typical_bundle():
    code = (
        '"use strict";\n'
        'Object.defineProperty(exports, "__esModule", { value: true });\n'
        "exports.hello = void 0;\n"
        "const hello = () => {};\n"
        "exports.hello = hello;\n"
    )
    result = purify_bundle(code)

    assert result.code == '"use strict";\nconst hello = () => {};\n'
    assert result.has_default_export is False


def test_removes_chained_initialisers_and_passthroughs():
    code = """
    "use strict";
    Object.defineProperty(exports, "__esModule", { value: true });
    exports.read = exports.hello = void 0;
    const hello = () => {};
    const read = () => {};
    exports.hello = hello;
    exports.read = read;
    """
    result = purify_bundle(code)

    assert "exports" not in result.code
    assert "const hello = () => {};" in result.code
    assert "const read = () => {};" in result.code


def test_external_exports_become_const_declarations():
    code = """
    const require_lib = require("./node_modules/lib.js");
    exports.SCRIPTS = require_lib.SCRIPTS;
    const hello = () => {};
    exports.hello = hello;
    """
    result = purify_bundle(code).code

    assert "const SCRIPTS = require_lib.SCRIPTS;" in result
    assert "exports.hello = hello" not in result
    assert "const hello = hello" not in result
    assert "const hello = () => {};" in result


def test_undefined_initialiser_is_removed():
    assert purify_bundle("exports.x = undefined;\nfoo();\n").code == "foo();\n"


def test_object_literal_default_export():
    code = """
    "use strict";
    Object.defineProperty(exports, "__esModule", { value: true });
    exports.default = {
        toast: function() {},
        test: 123
    };
    """
    result = purify_bundle(code)

    assert result.has_default_export is True
    assert "Object.assign(window, {" in result.code
    assert "test: 123" in result.code


def test_nested_statements_are_untouched():
    code = "function setup() {\n  exports.inner = 1;\n}\nconsole.log(exports.value);\n"
    assert purify_bundle(code).code == code


def test_statement_sharing_a_line_is_removed_alone():
    result = purify_bundle("foo(); exports.hello = hello;\nbar();\n")
    assert result.code == "foo(); \nbar();\n"


def test_assemble_mounts_named_exports():
    cleaned = '"use strict";\nconst hello = () => {};\nexport { hello };\n'

    assert assemble_preload_bundle(cleaned, "preload", ["hello", "default"]) == (
        '"use strict";\n'
        "window.preload = Object.create(null);\n"
        "const hello = () => {};\n"
        "\n"
        "window.preload = { hello };\n"
    )


def test_assemble_without_directive_or_exports():
    cleaned = "const a = 1;"
    assert assemble_preload_bundle(cleaned, "preload", []) == "const a = 1;"
    assert assemble_preload_bundle(cleaned, "preload", ["default"]) == "const a = 1;"


def test_assemble_handles_single_quoted_directive():
    result = assemble_preload_bundle("'use strict'\nconst a = 1;\n", "utools", ["a"])
    assert result.startswith("'use strict'\nwindow.utools = Object.create(null);")
    assert result.endswith("window.utools = { a };\n")
