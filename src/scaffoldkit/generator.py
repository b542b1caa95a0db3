"""Fragment generator for Fiber + GORM entities."""

from __future__ import annotations

import logging
from string import Template

from .models import (
    EntitySpec,
    FieldSpec,
    Fragment,
    GeneratedFragments,
    InsertionPolicy,
    ScaffoldConfig,
    TargetType,
)
from .naming import lower_camel, route_segment
from .typemap import classify

logger = logging.getLogger(__name__)

VIEW_NAMES = ("index", "insert", "show", "edit", "delete")

# Go template syntax uses braces heavily, so handler code is a string.Template
_HANDLERS_TEMPLATE = Template('''\
package handlers

import (
	"github.com/gofiber/fiber/v2"
	"gorm.io/gorm"
	"$models_import"
)

// Get${model}s retrieves all ${model}s from the database
func Get${model}s(db *gorm.DB) fiber.Handler {
	return func(c *fiber.Ctx) error {
		var records []models.$model
		if result := db.Find(&records); result.Error != nil {
			return c.Status(fiber.StatusInternalServerError).JSON(fiber.Map{
				"error": result.Error.Error(),
			})
		}
		return c.Render("$segment/index", fiber.Map{
			"Title":   "All ${model}s",
			"Records": records,
		}, "layouts/main")
	}
}

// Insert$model renders the insert form
func Insert$model() fiber.Handler {
	return func(c *fiber.Ctx) error {
		return c.Render("$segment/insert", fiber.Map{
			"Title": "Add New $model",
		}, "layouts/main")
	}
}

// Create$model handles the form submission for creating a new $model
func Create$model(db *gorm.DB) fiber.Handler {
	return func(c *fiber.Ctx) error {
		record := new(models.$model)
		if err := c.BodyParser(record); err != nil {
			return c.Status(fiber.StatusBadRequest).JSON(fiber.Map{
				"error": "Cannot parse JSON",
			})
		}
		if result := db.Create(record); result.Error != nil {
			return c.Status(fiber.StatusInternalServerError).JSON(fiber.Map{
				"error": result.Error.Error(),
			})
		}
		return c.Redirect("/$segment")
	}
}

// Show$model renders the details view for a specific $model
func Show$model(db *gorm.DB) fiber.Handler {
	return render${model}View(db, "$segment/show", "Show Entry")
}

// Edit$model renders the edit form for a specific $model
func Edit$model(db *gorm.DB) fiber.Handler {
	return render${model}View(db, "$segment/edit", "Edit Entry")
}

// Delete$model renders the delete confirmation view for a specific $model
func Delete$model(db *gorm.DB) fiber.Handler {
	return render${model}View(db, "$segment/delete", "Delete Entry")
}

// Update$model handles the form submission for updating a $model
func Update$model(db *gorm.DB) fiber.Handler {
	return func(c *fiber.Ctx) error {
		var record models.$model
		if err := db.First(&record, c.Params("id")).Error; err != nil {
			return c.Status(fiber.StatusNotFound).JSON(fiber.Map{
				"error": "$model not found",
			})
		}
		if err := c.BodyParser(&record); err != nil {
			return c.Status(fiber.StatusBadRequest).JSON(fiber.Map{
				"error": "Cannot parse JSON",
			})
		}
		if err := db.Save(&record).Error; err != nil {
			return c.Status(fiber.StatusInternalServerError).JSON(fiber.Map{
				"error": "Failed to update $model",
			})
		}
		return c.JSON(fiber.Map{"redirectUrl": "/$segment"})
	}
}

// Destroy$model handles the deletion of a $model
func Destroy$model(db *gorm.DB) fiber.Handler {
	return func(c *fiber.Ctx) error {
		var record models.$model
		if err := db.First(&record, c.Params("id")).Error; err != nil {
			return c.Status(fiber.StatusNotFound).JSON(fiber.Map{
				"error": "$model not found",
			})
		}
		if err := db.Unscoped().Delete(&record).Error; err != nil {
			return c.Status(fiber.StatusInternalServerError).JSON(fiber.Map{
				"error": "Failed to delete $model",
			})
		}
		return c.JSON(fiber.Map{"redirectUrl": "/$segment"})
	}
}

func render${model}View(db *gorm.DB, view string, title string) fiber.Handler {
	return func(c *fiber.Ctx) error {
		var record models.$model
		if err := db.First(&record, c.Params("id")).Error; err != nil {
			return c.Status(fiber.StatusNotFound).JSON(fiber.Map{
				"error": "$model not found",
			})
		}
		return c.Render(view, fiber.Map{"$var": record, "Title": title}, "layouts/main")
	}
}
''')

_FETCH_SCRIPT = Template('''\
    <script>
        document.getElementById('$form_id').addEventListener('submit', async function(event) {
            event.preventDefault();$confirm
            const body = {};
            Array.from(event.target.elements).forEach(input => {
                if (!input.name) return;
                body[input.name] = input.type === 'number' ? Number(input.value) : input.value;
            });
            const response = await fetch('/$segment/{{.$var.ID}}', {
                method: '$method',
                headers: {'Content-Type': 'application/json'},
                body: '$method' === 'DELETE' ? null : JSON.stringify(body)
            });
            if (response.ok) {
                window.location.href = '/$segment';
            } else {
                const errorData = await response.json();
                alert('Error: ' + errorData.error);
            }
        });
    </script>''')


class FragmentGenerator:
    """Renders the fragments for one entity.

    The generator is a pure transform: it reads nothing from disk and holds no
    state beyond the project configuration.
    """

    def __init__(self, config: ScaffoldConfig | None = None) -> None:
        """Initialize generator with project configuration.

        Args:
            config: Project configuration, defaults when omitted
        """
        self.config = config or ScaffoldConfig()

    def generate(self, entity: EntitySpec) -> GeneratedFragments:
        """Generate every fragment for an entity."""
        logger.debug("Generating fragments for %s", entity.identifier)
        return GeneratedFragments(
            model=self.model_fragment(entity),
            migration=self.migration_fragment(entity),
            handlers=self.handlers_fragment(entity),
            route_block=self.route_fragment(entity),
            model_list_entry=self.model_list_fragment(entity),
            registry_entry=self.registry_fragment(entity),
            views=self.view_fragments(entity),
        )

    def _import_path(self, package: str) -> str:
        project = self.config.project_name.strip("/")
        return f"{project}/{package}" if project else package

    def model_fragment(self, entity: EntitySpec) -> Fragment:
        name = entity.identifier
        field_types = [classify(field.type) for field in entity.fields]

        if TargetType.TIMESTAMP in field_types:
            imports = 'import (\n\t"time"\n\n\t"gorm.io/gorm"\n)'
        else:
            imports = 'import "gorm.io/gorm"'

        lines = [
            "package models",
            "",
            imports,
            "",
            f"// {name} model",
            f"type {name} struct {{",
            "\tgorm.Model",
        ]
        for field, target in zip(entity.fields, field_types):
            lines.append(f"\t{field.identifier} {target.go_type}")

        ref = entity.reference_identifier
        if ref is not None:
            lines.append(f"\t{ref}ID int")
            lines.append(f'\t{ref} {ref} `gorm:"foreignKey:{ref}ID;references:ID"`')
        lines.append("}")

        return Fragment(
            target=f"{self.config.paths.models_dir}/{entity.table_name}.go",
            policy=InsertionPolicy.REPLACE,
            text="\n".join(lines) + "\n",
        )

    def migration_fragment(self, entity: EntitySpec) -> Fragment:
        preamble = (
            "package helpers\n"
            "\n"
            "import (\n"
            '\t"gorm.io/gorm"\n'
            f'\t"{self._import_path("models")}"\n'
            ")\n"
            "\n"
            "func Migrate(db *gorm.DB) {\n"
        )
        return Fragment(
            target=self.config.paths.migrations,
            policy=InsertionPolicy.APPEND_BEFORE_TERMINATOR,
            text=f"\tdb.AutoMigrate(&models.{entity.identifier}{{}})\n",
            preamble=preamble,
        )

    def handlers_fragment(self, entity: EntitySpec) -> Fragment:
        name = entity.identifier
        text = _HANDLERS_TEMPLATE.substitute(
            model=name,
            var=lower_camel(name),
            segment=route_segment(entity.table_name),
            models_import=self._import_path("models"),
        )
        return Fragment(
            target=f"{self.config.paths.handlers_dir}/{name.lower()}_handlers.go",
            policy=InsertionPolicy.REPLACE,
            text=text,
        )

    def route_fragment(self, entity: EntitySpec) -> Fragment:
        name = entity.identifier
        group = f"{lower_camel(name)}Group"
        routes = [
            ("Get", "/", f"Get{name}s(dbGorm)"),
            ("Get", "/insert", f"Insert{name}()"),
            ("Post", "/", f"Create{name}(dbGorm)"),
            ("Get", "/:id", f"Show{name}(dbGorm)"),
            ("Get", "/:id/edit", f"Edit{name}(dbGorm)"),
            ("Put", "/:id", f"Update{name}(dbGorm)"),
            ("Get", "/:id/delete", f"Delete{name}(dbGorm)"),
            ("Delete", "/:id", f"Destroy{name}(dbGorm)"),
        ]
        lines = [
            "",
            f"\t// {name} routes",
            f'\t{group} := app.Group("/{route_segment(entity.table_name)}")',
        ]
        lines.extend(
            f'\t{group}.{method}("{path}", handlers.{handler})'
            for method, path, handler in routes
        )

        preamble = (
            "package internals\n"
            "\n"
            "import (\n"
            f'\t"{self._import_path("handlers")}"\n'
            '\t"github.com/gofiber/fiber/v2"\n'
            '\t"gorm.io/gorm"\n'
            ")\n"
            "\n"
            "func SetupRoutes(app *fiber.App, dbGorm *gorm.DB) {\n"
            "\t// Dev routes\n"
            '\tDev := app.Group("/dev")\n'
            '\tDev.Get("/", handlers.GetDevView())\n'
            '\tDev.Get("/migrate", handlers.GetMigration(dbGorm))\n'
            '\tDev.Post("/", handlers.ProcessIncomingScaffoldData(dbGorm))\n'
        )
        return Fragment(
            target=self.config.paths.routes,
            policy=InsertionPolicy.APPEND_BEFORE_TERMINATOR,
            text="\n".join(lines) + "\n",
            preamble=preamble,
        )

    def model_list_fragment(self, entity: EntitySpec) -> Fragment:
        return Fragment(
            target=self.config.paths.model_list,
            policy=InsertionPolicy.APPEND_WITH_DECLARATION_HEADER,
            text=f"\tmodels_list = append(models_list, models.{entity.identifier}{{}})",
            preamble="package helpers\n\nvar models_list []interface{}\n",
            declaration=f'import "{self._import_path("models")}"',
            import_path=self._import_path("models"),
            block_opener="func init() {",
        )

    def registry_fragment(self, entity: EntitySpec) -> Fragment:
        # Reference-derived fields are not part of the registered schema
        return Fragment(
            target=self.config.paths.registry,
            policy=InsertionPolicy.APPEND_TO_KEYED_CONTAINER,
            key=entity.identifier,
            value=[{"name": f.name, "type": f.type} for f in entity.fields],
        )

    def view_fragments(self, entity: EntitySpec) -> list[Fragment]:
        segment = route_segment(entity.table_name)
        renderers = {
            "index": self._index_view,
            "insert": self._insert_view,
            "show": self._show_view,
            "edit": self._edit_view,
            "delete": self._delete_view,
        }
        return [
            Fragment(
                target=f"{self.config.paths.views_dir}/{segment}/{view}.html",
                policy=InsertionPolicy.REPLACE,
                text=renderers[view](entity) + "\n",
            )
            for view in VIEW_NAMES
        ]

    def _index_view(self, entity: EntitySpec) -> str:
        segment = route_segment(entity.table_name)
        headers = "".join(f"<th>{f.name}</th>" for f in entity.fields)
        cells = "".join(f"<td>{{{{.{f.identifier}}}}}</td>" for f in entity.fields)
        return "\n".join([
            f"<h2>All {entity.table_name}</h2>",
            f'<a href="/{segment}/insert">Add +</a>',
            "<table>",
            "    <thead>",
            f"        <tr>{headers}<th>Actions</th><th>Created At</th></tr>",
            "    </thead>",
            "    <tbody>",
            f"        {{{{range .Records}}}}<tr>{cells}",
            f'            <td><a href="/{segment}/{{{{.ID}}}}/edit">Edit</a> | '
            f'<a href="/{segment}/{{{{.ID}}}}/delete">Delete</a></td>',
            "            <td>{{.CreatedAt}}</td>",
            "        </tr>{{end}}",
            "    </tbody>",
            "</table>",
        ])

    def _form_inputs(self, entity: EntitySpec, bound: bool) -> list[str]:
        var = lower_camel(entity.identifier)
        inputs = []
        for field in entity.fields:
            value = f' value="{{{{.{var}.{field.identifier}}}}}"' if bound else ""
            inputs.append(f'    <label for="{field.name}">{field.name}:</label>')
            inputs.append(
                f'    <input type="{classify(field.type).html_input}" id="{field.name}" '
                f'name="{field.name}"{value} required>'
            )
        return inputs

    def _insert_view(self, entity: EntitySpec) -> str:
        segment = route_segment(entity.table_name)
        return "\n".join([
            f"<h2>Add {entity.table_name}</h2>",
            f'<form action="/{segment}" method="POST">',
            *self._form_inputs(entity, bound=False),
            f'    <button type="submit">Add {entity.table_name}</button>',
            "</form>",
        ])

    def _detail_rows(self, entity: EntitySpec) -> str:
        var = lower_camel(entity.identifier)
        return "".join(
            f"<tr><th>{f.name}</th><td>{{{{.{var}.{f.identifier}}}}}</td></tr>"
            for f in entity.fields
        )

    def _show_view(self, entity: EntitySpec) -> str:
        return "\n".join([
            f"<h2>Show {entity.table_name}</h2>",
            "<table>",
            f"    <tbody>{self._detail_rows(entity)}</tbody>",
            "</table>",
            f'<a href="/{route_segment(entity.table_name)}">Back</a>',
        ])

    def _edit_view(self, entity: EntitySpec) -> str:
        script = _FETCH_SCRIPT.substitute(
            form_id="editForm",
            confirm="",
            segment=route_segment(entity.table_name),
            var=lower_camel(entity.identifier),
            method="PUT",
        )
        return "\n".join([
            f"<h2>Edit {entity.table_name}</h2>",
            '<form id="editForm">',
            *self._form_inputs(entity, bound=True),
            f'    <button type="submit">Update {entity.table_name}</button>',
            "</form>",
            script,
        ])

    def _delete_view(self, entity: EntitySpec) -> str:
        segment = route_segment(entity.table_name)
        script = _FETCH_SCRIPT.substitute(
            form_id="deleteForm",
            confirm="\n            if (!confirm('Are you sure you want to delete this?')) return;",
            segment=segment,
            var=lower_camel(entity.identifier),
            method="DELETE",
        )
        return "\n".join([
            f"<h2>Delete {entity.table_name}</h2>",
            "<table>",
            f"    <tbody>{self._detail_rows(entity)}</tbody>",
            "</table>",
            '<form id="deleteForm">',
            '    <button type="submit">Delete</button>',
            "</form>",
            f'<a href="/{segment}">Back</a>',
            script,
        ])
