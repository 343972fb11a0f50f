from inkwell.context import lazy
from inkwell.directives import (
    EachBlock,
    IfBlock,
    Text,
    Variable,
    evaluate_condition,
    parse_template,
    render_template,
)


def test_variable_substitution():
    assert render_template("Hello {{name}}!", {"name": "Ada"}) == "Hello Ada!"
    assert render_template("{{ site.title }}", {"site": {"title": "Notes"}}) == "Notes"


def test_missing_variable_renders_empty():
    assert render_template("[{{nope}}]", {}) == "[]"
    assert render_template("[{{a.b.c}}]", {"a": {}}) == "[]"


def test_each_over_mappings():
    ctx = {"xs": [{"v": "a"}, {"v": "b"}]}
    assert render_template("{{#each xs}}{{v}}{{/each}}", ctx) == "ab"


def test_each_over_empty_or_missing_renders_nothing():
    assert render_template("{{#each xs}}{{v}}{{/each}}", {"xs": []}) == ""
    assert render_template("<{{#each xs}}x{{/each}}>", {}) == "<>"
    assert render_template("{{#each xs}}x{{/each}}", {"xs": "not a list"}) == ""


def test_each_scalars_use_this_and_index():
    ctx = {"tags": ["go", "py"]}
    out = render_template("{{#each tags}}{{_index}}:{{this}} {{/each}}", ctx)
    assert out == "0:go 1:py "


def test_each_exposes_parent_context():
    ctx = {"prefix": "#", "tags": [{"name": "go"}, {"name": "py"}]}
    out = render_template("{{#each tags}}{{_parent.prefix}}{{name}}{{/each}}", ctx)
    assert out == "#go#py"


def test_if_else_branches():
    template = "{{#if show}}Y{{else}}N{{/if}}"
    assert render_template(template, {"show": True}) == "Y"
    assert render_template(template, {"show": False}) == "N"
    assert render_template(template, {}) == "N"
    assert render_template(template, {"show": []}) == "N"
    assert render_template(template, {"show": ["x"]}) == "Y"


def test_if_without_else():
    assert render_template("a{{#if x}}b{{/if}}c", {"x": 1}) == "abc"
    assert render_template("a{{#if x}}b{{/if}}c", {"x": 0}) == "ac"


def test_nested_blocks_of_same_kind_pair_correctly():
    template = "{{#if a}}A{{#if b}}B{{else}}b{{/if}}{{else}}-{{/if}}"
    assert render_template(template, {"a": True, "b": True}) == "AB"
    assert render_template(template, {"a": True, "b": False}) == "Ab"
    assert render_template(template, {"a": False, "b": True}) == "-"


def test_nested_each_blocks():
    ctx = {
        "groups": [
            {"name": "x", "items": [{"v": 1}, {"v": 2}]},
            {"name": "y", "items": [{"v": 3}]},
        ]
    }
    template = "{{#each groups}}{{name}}({{#each items}}{{v}}{{/each}}){{/each}}"
    assert render_template(template, ctx) == "x(12)y(3)"


def test_if_inside_each_uses_item_fields():
    ctx = {"pages": [{"n": 1, "cur": False}, {"n": 2, "cur": True}]}
    template = "{{#each pages}}{{#if cur}}[{{n}}]{{else}}{{n}}{{/if}}{{/each}}"
    assert render_template(template, ctx) == "1[2]"


def test_comparisons():
    ctx = {"count": 1, "kind": "post", "label": "1"}
    assert evaluate_condition("count == 1", ctx)
    assert evaluate_condition("count == label", ctx)
    assert not evaluate_condition("count === label", ctx)
    assert evaluate_condition("count !== label", ctx)
    assert evaluate_condition("kind == 'post'", ctx)
    assert evaluate_condition('kind != "page"', ctx)
    assert evaluate_condition("kind === post", ctx)


def test_malformed_conditions_are_false():
    ctx = {"a": 1}
    assert not evaluate_condition("a <> 1", ctx)
    assert not evaluate_condition("a == 1 == 1", ctx)
    assert render_template("{{#if a ~ b}}Y{{else}}N{{/if}}", ctx) == "N"


def test_unmatched_directives_stay_literal():
    assert render_template("{{#if x}}no close", {"x": True}) == "{{#if x}}no close"
    assert render_template("stray {{/each}}", {}) == "stray {{/each}}"
    assert render_template("lonely {{else}}", {}) == "lonely {{else}}"
    assert render_template("open {{ brace", {}) == "open {{ brace"


def test_crossing_blocks_keep_inner_opener_literal():
    out = render_template("{{#if a}}{{#each xs}}x{{/if}}{{/each}}", {"a": True, "xs": [1]})
    assert out == "{{#each xs}}x{{/each}}"


def test_substituted_values_are_not_rescanned():
    ctx = {"body": "{{#if secret}}leak{{/if}}", "secret": True}
    assert render_template("{{body}}", ctx) == "{{#if secret}}leak{{/if}}"


def test_lazy_values_render_and_iterate():
    ctx = {"items": lazy(lambda: [{"v": "a"}]), "greeting": lazy(lambda: "hi")}
    assert render_template("{{greeting}}{{#each items}}{{v}}{{/each}}", ctx) == "hia"


def test_lazy_value_not_invoked_when_unused():
    calls = []
    ctx = {"expensive": lazy(lambda: calls.append(1) or "x"), "show": False}
    assert render_template("{{#if show}}{{expensive}}{{/if}}", ctx) == ""
    assert calls == []


def test_parse_tree_shape():
    template = parse_template("a{{x}}{{#each xs}}b{{/each}}{{#if y}}c{{else}}d{{/if}}")
    assert template.nodes == (
        Text("a"),
        Variable("x"),
        EachBlock("xs", (Text("b"),)),
        IfBlock("y", (Text("c"),), (Text("d"),)),
    )


def test_parsed_template_is_reusable():
    template = parse_template("{{#each xs}}{{this}}{{/each}}")
    assert template.render({"xs": [1, 2]}) == "12"
    assert template.render({"xs": ["a"]}) == "a"


def test_empty_template():
    assert render_template("", {"a": 1}) == ""
    assert parse_template("").nodes == ()
