"""Module scaffolding templates: plain Python strings for ``perch make:module``.

No template engine here. Simple ``str.format()`` substitution with:

- ``{module}``: module name (``Blog``)
- ``{lower}``: lowercased module name, used for URLs (``blog``)
- ``{controller}``: controller class name (``BlogController``)
- ``{model}`` / ``{model_module}`` / ``{table}``: model class, its file
  stem and table name (``BlogModel``, ``blog_model``, ``blogs``)
- ``{date}``: generation date
"""

PACKAGE_INIT_PY = '''\
"""{module} module."""
'''

CONTROLLERS_INIT_PY = '''\
"""Controllers of the {module} module."""
'''

MODELS_INIT_PY = '''\
"""Models of the {module} module."""
'''

# ---------------------------------------------------------------------------
# Controllers
# ---------------------------------------------------------------------------

CONTROLLER_PY = '''\
"""{controller}. Generated by perch make:module on {date}."""

from perch import Controller


class {controller}(Controller):
    def index(self):
        return self.view_with_layout("index", title="{module}", items=[])

    def show(self, id):
        return self.view_with_layout("show", title="{module} #" + id, id=id)
'''

CONTROLLER_MINIMAL_PY = '''\
"""{controller}. Generated by perch make:module on {date}."""

from perch import Controller


class {controller}(Controller):
    def index(self):
        return self.view("index", title="{module}")
'''

CONTROLLER_RESOURCE_PY = '''\
"""{controller}. Generated by perch make:module on {date}."""

from perch import Controller

from ..Models.{model_module} import {model}


class {controller}(Controller):
    def index(self):
        return self.view_with_layout("index", title="{module}", items=[])

    def create(self):
        return self.view_with_layout("create", title="New {lower}")

    def store(self):
        {model}.from_params(self.request.params)
        return self.redirect("/{lower}")

    def show(self, id):
        return self.view_with_layout("show", title="{module} #" + id, id=id)

    def edit(self, id):
        return self.view_with_layout("edit", title="Edit {lower} #" + id, id=id)

    def update(self, id):
        return self.redirect(f"/{lower}/{{id}}")

    def destroy(self, id):
        return self.redirect("/{lower}")
'''

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

ROUTER_PY = '''\
"""Routes of the {module} module."""


def register(router, module):
    router.get("/{lower}", "{controller}@index", module)
    router.get("/{lower}/{{id}}", "{controller}@show", module)
'''

ROUTER_MINIMAL_PY = '''\
"""Routes of the {module} module."""


def register(router, module):
    router.get("/{lower}", "{controller}@index", module)
'''

ROUTER_RESOURCE_PY = '''\
"""Routes of the {module} module."""


def register(router, module):
    router.resource("{lower}", "{controller}", module)
'''

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

MODEL_PY = '''\
"""{model}. Generated by perch make:module on {date}."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(slots=True)
class {model}:
    table: ClassVar[str] = "{table}"

    id: int | None = None
'''

MODEL_RESOURCE_PY = '''\
"""{model}. Generated by perch make:module on {date}."""

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(slots=True)
class {model}:
    table: ClassVar[str] = "{table}"

    id: int | None = None
    title: str = ""
    content: str = ""

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> "{model}":
        raw_id = params.get("id")
        return cls(
            id=int(raw_id) if raw_id else None,
            title=str(params.get("title", "")),
            content=str(params.get("content", "")),
        )
'''

# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

INDEX_HTML = """\
<h1>{module}</h1>
{{% if items %}}
    {{% for item in items %}}
    <p>{{{{ item }}}}</p>
    {{% endfor %}}
{{% else %}}
    <p>Nothing here yet.</p>
{{% endif %}}
"""

INDEX_MINIMAL_HTML = """\
<h1>{{{{ title }}}}</h1>
<p>The {module} module works.</p>
"""

SHOW_HTML = """\
<h1>{module} #{{{{ id }}}}</h1>
<p><a href="/{lower}">Back to the list</a></p>
"""

CREATE_HTML = """\
<h1>New {lower}</h1>
<form method="post" action="/{lower}">
    <input name="title" placeholder="Title">
    <textarea name="content"></textarea>
    <button type="submit">Create</button>
</form>
"""

EDIT_HTML = """\
<h1>Edit {lower} #{{{{ id }}}}</h1>
<form method="post" action="/{lower}/{{{{ id }}}}">
    <input type="hidden" name="_method" value="PUT">
    <input name="title" placeholder="Title">
    <textarea name="content"></textarea>
    <button type="submit">Save</button>
</form>
"""
