from django.template import Context, Template, TemplateSyntaxError
from django.test import SimpleTestCase

from labelify.forms import FormBuilder
from labelify.tests.base import Address, Person, person_with_base_errors, person_with_errors, pq


def render_template(source, **context):
    return Template("{% load labelled_forms %}" + source).render(Context(context))


class LabelledFormTag(SimpleTestCase):
    def test_empty_form(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% endlabelled_form_for %}',
            person=Person(),
        )
        assert html == '<form method="post"></form>'

    def test_form_options(self):
        html = render_template(
            '{% labelled_form_for "person" person url="/save/" as f %}{% endlabelled_form_for %}',
            person=Person(),
        )
        assert len(pq(html)('form[action="/save/"][method="post"]')) == 1

    def test_field(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% field f "text_field" "name" %}{% endlabelled_form_for %}',
            person=Person(),
        )
        assert html == (
            '<form method="post">'
            '<label for="person_name"><span class="field_name">Name</span></label>'
            '<input type="text" id="person_name" name="person[name]" value="Tester"/>'
            "</form>"
        )

    def test_field_options(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}'
            '{% field f "text_field" "name" label="Your name" class="big" %}'
            '{% field f "check_box" "admin" label=False %}'
            "{% endlabelled_form_for %}",
            person=Person(),
        )
        doc = pq(html)
        assert doc('label.big[for="person_name"] span.field_name').text() == "Your name"
        assert len(doc('label[for="person_admin"]')) == 0
        assert len(doc('input[type="checkbox"]')) == 1

    def test_field_with_extra_argument(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% field f "select" "gender" choices %}{% endlabelled_form_for %}',
            person=Person(),
            choices=[("m", "Male"), ("f", "Female")],
        )
        doc = pq(html)
        assert len(doc('label[for="person_gender"]')) == 1
        assert doc("option[selected]").text() == "Male"

    def test_no_label_for(self):
        html = render_template(
            '{% labelled_form_for "person" person no_label_for="check_box" as f %}'
            '{% field f "check_box" "admin" %}'
            "{% endlabelled_form_for %}",
            person=Person(),
        )
        assert len(pq(html)("label")) == 0

    def test_errors(self):
        person = person_with_errors(name=["name error"])
        person.errors["__all__"] = ["base error"]
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% field f "text_field" "name" %}{% endlabelled_form_for %}',
            person=person,
        )
        assert html.startswith('<span class="error_message">base error</span><form')
        assert pq(html)('label[for="person_name"] .error_message').text() == "name error"

    def test_base_error_only(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% endlabelled_form_for %}',
            person=person_with_base_errors("e1", "e2"),
        )
        assert html == '<span class="error_message">e1 and e2</span><form method="post"></form>'

    def test_submit(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% submit f "save" class="button" %}{% endlabelled_form_for %}',
            person=Person(),
        )
        assert '<input type="submit" value="save" class="submit button"/>' in html

    def test_submit_button(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% submit f "save" type="button" %}{% endlabelled_form_for %}',
            person=Person(),
        )
        assert '<button type="submit" class="submit"><span>save</span></button>' in html

    def test_label(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% label f "name" label_value="Who" %}{% endlabelled_form_for %}',
            person=Person(),
        )
        assert pq(html)('label[for="person_name"] span.field_name').text() == "Who"

    def test_builder_not_left_in_context(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}{% endlabelled_form_for %}[{{ f }}]',
            person=Person(),
        )
        assert html.endswith("[]")

    def test_missing_as(self):
        with self.assertRaises(TemplateSyntaxError):
            render_template('{% labelled_form_for "person" person %}{% endlabelled_form_for %}')

    def test_missing_object_name(self):
        with self.assertRaises(TemplateSyntaxError):
            render_template("{% labelled_form_for as f %}{% endlabelled_form_for %}")


class ScopeTags(SimpleTestCase):
    def test_with_association(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}'
            '{% with_association f "address" as a %}{% field a "text_field" "city" %}{% endwith_association %}'
            '{% field f "text_field" "name" %}'
            "{% endlabelled_form_for %}",
            person=Person(address=Address()),
        )
        doc = pq(html)
        assert len(doc('label[for="address_city"]')) == 1
        assert doc('input[name="address[city]"]').attr("value") == "Amsterdam"
        # Binding is restored after the block
        assert len(doc('label[for="person_name"]')) == 1

    def test_with_object(self):
        html = render_template(
            '{% labelled_form_for "person" person as f %}'
            '{% with_object f "address" address as a %}{% field a "text_field" "city" %}{% endwith_object %}'
            "{% endlabelled_form_for %}",
            person=Person(),
            address=Address(city="Utrecht"),
        )
        doc = pq(html)
        assert len(doc('label[for="address_city"]')) == 1
        assert doc('input[name="address[city]"]').attr("value") == "Utrecht"

    def test_wrong_number_of_arguments(self):
        with self.assertRaises(TemplateSyntaxError):
            render_template('{% with_association f "address" "extra" as a %}{% endwith_association %}')
        with self.assertRaises(TemplateSyntaxError):
            render_template("{% with_object f as a %}{% endwith_object %}")


class PlainBuilderTags(SimpleTestCase):
    def test_submit_and_label(self):
        html = render_template('{% label f "name" %}{% submit f "save" %}', f=FormBuilder("person", Person()))
        assert html == (
            '<label for="person_name"><span class="field_name">Name</span></label>'
            '<input type="submit" value="save" class="submit"/>'
        )
