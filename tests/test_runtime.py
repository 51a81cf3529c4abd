import pytest
from pydantic import TypeAdapter

from qen.exceptions import InferenceAmbiguityWarning, TemplateExecutionError, TemplateLoadError
from qen.runtime import execute, load_template

TODO_LIST = (
    "<h1>{{ page_title }}</h1>\n"
    "{% for todo in todos %}- [{{ 'x' if todo.done else ' ' }}] {{ todo.title }}\n{% endfor %}"
)


def test_render_todo_list(build_module):
    m = build_module("todo_list", TODO_LIST)

    data = m.TodoListInput(
        page_title="Chores",
        todos=[
            m.TodoListInputTodos(done=True, title="Dishes"),
            m.TodoListInputTodos(done=False, title="Laundry"),
        ],
    )

    assert m.render_todo_list(data) == "<h1>Chores</h1>\n- [x] Dishes\n- [ ] Laundry\n"


def test_render_accepts_plain_data(build_module):
    m = build_module("todo_list", TODO_LIST)
    assert m.render_todo_list({"page_title": "Empty", "todos": []}) == "<h1>Empty</h1>\n"


def test_invalid_input_is_an_execution_error(build_module):
    m = build_module("todo_list", TODO_LIST)

    with pytest.raises(TemplateExecutionError) as excinfo:
        m.render_todo_list({"page_title": "Missing todos"})
    assert "invalid input" in str(excinfo.value)


def test_render_root_list(build_module):
    m = build_module("root_array", "{% for row in root %}{{ row.title }};{% endfor %}")

    rows = [m.RootArrayElement(title="a"), m.RootArrayElement(title="b")]
    assert m.render_root_array(rows) == "a;b;"


def test_render_root_list_of_strings(build_module):
    m = build_module("tags", "{% for tag in root %}#{{ tag }} {% endfor %}")
    assert m.render_tags(["x", "y"]) == "#x #y "


def test_render_nested_models(build_module):
    m = build_module("report", "{{ user.name }} lives in {{ user.address.city }}")

    data = m.ReportInput(
        user=m.ReportInputUser(name="Ada", address=m.ReportInputUserAddress(city="London"))
    )
    assert m.render_report(data) == "Ada lives in London"


def test_render_aliased_fields(build_module):
    m = build_module("ids", "{{ _id }}/{{ json }}")

    assert m.render_ids(m.IdsInput(id_="1", json_="2")) == "1/2"
    assert m.render_ids({"_id": "3", "json": "4"}) == "3/4"


def test_render_ambiguous_root_as_field(build_module):
    with pytest.warns(InferenceAmbiguityWarning):
        m = build_module("page", "{{ heading }}:{% for r in root %}{{ r }}{% endfor %}")

    assert m.render_page(m.PageInput(heading="H", root=["a", "b"])) == "H:ab"


def test_missing_template_is_a_load_error(build_module, tmp_path):
    m = build_module("gone", "{{ title }}")
    (tmp_path / "gone.html").unlink()

    with pytest.raises(TemplateLoadError) as excinfo:
        m.render_gone({"title": "x"})
    assert "gone.html" in str(excinfo.value)


def test_broken_template_is_a_load_error(build_module, tmp_path):
    m = build_module("broken", "{{ title }}")
    (tmp_path / "broken.html").write_text("{% if title %}")

    with pytest.raises(TemplateLoadError):
        m.render_broken({"title": "x"})


def test_undefined_value_is_an_execution_error(tmp_path):
    path = tmp_path / "strict.html"
    path.write_text("{{ missing.attr }}")

    template = load_template(path)
    with pytest.raises(TemplateExecutionError):
        execute(template, TypeAdapter(dict), {})


def test_filter_failure_is_an_execution_error(tmp_path):
    path = tmp_path / "divide.html"
    path.write_text("{{ 1 // n }}")

    template = load_template(path)
    with pytest.raises(TemplateExecutionError) as excinfo:
        execute(template, TypeAdapter(dict), {"n": 0})
    assert "ZeroDivisionError" in str(excinfo.value)


def test_load_template_missing_file(tmp_path):
    with pytest.raises(TemplateLoadError):
        load_template(tmp_path / "nope.html")


def test_field_named_like_a_dict_method_in_a_loop(build_module):
    m = build_module("order", "{% for i in order.items %}{{ i.name }};{% endfor %}")

    data = {"order": {"items": [{"name": "a"}, {"name": "b"}]}}
    assert m.render_order(data) == "a;b;"


def test_field_named_like_a_dict_method_interpolated(build_module):
    m = build_module("stats", "{{ stats.values }}/{{ stats.keys }}")

    data = m.StatsInput(stats=m.StatsInputStats(values="42", keys="k"))
    assert m.render_stats(data) == "42/k"
