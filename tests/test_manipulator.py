import copy
import unittest

from dom_manipulator import (
    DifferentParentsError,
    DocumentNotFoundError,
    EmptySelectionError,
    Manipulator,
    NoParentElementError,
)
from dom_manipulator.dom import Document, NodeType

PAGE = '<html><head></head><body><div id="box"><p>One</p><p>Two</p></div></body></html>'


def tag_names(nodes):
    return [node.node_name for node in nodes]


class TestConstruction(unittest.TestCase):
    def test_fragment(self) -> None:
        selection = Manipulator('<p>a</p>\n<p>b</p>')
        self.assertEqual(len(selection), 2)
        self.assertEqual(tag_names(selection), ['p', 'p'])
        self.assertEqual(selection[0].parent_node.node_name, '__tmp__')
        self.assertFalse(selection.is_html_document())

    def test_fragment_with_text(self) -> None:
        selection = Manipulator('hello <b>world</b>')
        self.assertEqual(len(selection), 2)
        self.assertEqual(selection[0].node_type, NodeType.TEXT_NODE)
        self.assertEqual(selection.get_combined_text(), 'hello world')

    def test_complete_document(self) -> None:
        selection = Manipulator(PAGE)
        self.assertEqual(len(selection), 1)
        self.assertEqual(selection.node_name(), 'html')
        self.assertTrue(selection.is_html_document())

    def test_xml_content(self) -> None:
        selection = Manipulator()
        selection.add_content('<root><item>1</item><empty/></root>', 'application/xml')
        self.assertEqual(selection.node_name(), 'root')
        self.assertEqual(str(selection), '<root><item>1</item><empty/></root>')

    def test_content_type_is_case_insensitive(self) -> None:
        selection = Manipulator()
        selection.add_content('<p>x</p>', 'TEXT/HTML; charset=UTF-8')
        self.assertEqual(selection.node_name(), 'p')
        self.assertFalse(selection.is_html_document())

        selection = Manipulator()
        selection.add_content('<root/>', 'Application/XML')
        self.assertEqual(selection.node_name(), 'root')

    def test_space_between_inline_elements_is_kept(self) -> None:
        self.assertEqual(Manipulator('<p><b>a</b> <i>b</i></p>').text(), 'a b')
        self.assertEqual(Manipulator('<b>a</b> <i>b</i>').get_combined_text(), 'a b')

    def test_add_node_on_wide_selection(self) -> None:
        page = Manipulator('<html><body><ul>' + '<li>x</li>' * 2000 + '</ul></body></html>')
        items = page.find('li')
        self.assertEqual(len(items), 2000)
        items.add(page.find('li'))
        self.assertEqual(len(items), 2000)

    def test_bytes_with_charset(self) -> None:
        selection = Manipulator()
        selection.add_content('<p>café</p>'.encode('iso-8859-1'), 'text/html;charset=ISO-8859-1')
        self.assertEqual(selection.text(), 'café')

    def test_create_passes_selections_through(self) -> None:
        selection = Manipulator('<p>a</p>')
        self.assertIs(Manipulator.create(selection), selection)
        self.assertIsNot(Manipulator.create('<p>a</p>'), selection)

    def test_add_ignores_duplicates_and_none(self) -> None:
        selection = Manipulator('<p>a</p>')
        node = selection[0]
        selection.add_node(node)
        selection.add_node(None)
        selection.add([node, node])
        self.assertEqual(len(selection), 1)

    def test_add_document_contributes_document_element(self) -> None:
        document = Manipulator(PAGE).get_dom_document()
        selection = Manipulator(document)
        self.assertIs(selection[0], document.document_element)

    def test_clear_leaves_dom_alone(self) -> None:
        page = Manipulator(PAGE)
        paragraphs = page.find('p')
        paragraphs.clear()
        self.assertEqual(len(paragraphs), 0)
        self.assertEqual(len(page.find('p')), 2)


class TestSequence(unittest.TestCase):
    def setUp(self) -> None:
        self.items = Manipulator('<li>1</li><li>2</li><li>3</li>')

    def test_indexing(self) -> None:
        self.assertEqual(self.items.eq(1).text(), '2')
        self.assertEqual(self.items.first().text(), '1')
        self.assertEqual(self.items.last().text(), '3')
        self.assertIsNone(self.items.get_node(5))
        self.assertEqual(len(self.items.eq(5)), 0)
        self.assertEqual(self.items.count(), 3)

    def test_slice(self) -> None:
        self.assertEqual([node.text_content for node in self.items.slice(1)], ['2', '3'])
        self.assertEqual([node.text_content for node in self.items.slice(0, 2)], ['1', '2'])

    def test_each(self) -> None:
        result = self.items.each(lambda item, index: f"{index}:{item.text()}")
        self.assertEqual(result, ['0:1', '1:2', '2:3'])

    def test_reduce(self) -> None:
        odd = self.items.reduce(lambda item, index: index % 2 == 0)
        self.assertEqual(odd.get_combined_text(), '13')

    def test_bool(self) -> None:
        self.assertTrue(self.items)
        self.assertFalse(Manipulator())


class TestTraversal(unittest.TestCase):
    def setUp(self) -> None:
        self.page = Manipulator('<html><body><ul class="menu"><li class="a">1</li><li class="b">2</li>'
                                '<li class="a">3</li></ul><p>x</p></body></html>')

    def test_find(self) -> None:
        self.assertEqual(self.page.find('li.a').get_combined_text(), '13')
        self.assertEqual(len(self.page.find('table')), 0)

    def test_find_deduplicates(self) -> None:
        selection = Manipulator(self.page.find('ul'))
        selection.add(self.page.find('body'))
        self.assertEqual(len(selection.find('li')), 3)

    def test_filter_keeps_own_nodes(self) -> None:
        items = self.page.find('li')
        self.assertEqual(items.filter('.b').text(), '2')
        self.assertEqual(len(self.page.filter('li')), 0)

    def test_children(self) -> None:
        ul = self.page.find('ul')
        self.assertEqual(len(ul.children()), 3)
        self.assertEqual(ul.children('.a').get_combined_text(), '13')

    def test_parents(self) -> None:
        self.assertEqual(tag_names(self.page.find('li').parents()), ['ul', 'body', 'html'])

    def test_siblings(self) -> None:
        self.assertEqual(self.page.find('li.b').siblings().get_combined_text(), '13')

    def test_next_and_previous_all(self) -> None:
        first = self.page.find('li').first()
        self.assertEqual(first.next_all().get_combined_text(), '23')
        last = self.page.find('li').last()
        self.assertEqual(last.previous_all().get_combined_text(), '21')

    def test_closest(self) -> None:
        self.assertEqual(tag_names(self.page.find('li').closest('ul')), ['ul'])
        self.assertEqual(len(self.page.find('li').closest('table')), 0)

    def test_traversal_on_empty_selection(self) -> None:
        with self.assertRaises(EmptySelectionError):
            Manipulator().parents()


class TestReading(unittest.TestCase):
    def test_text_and_html(self) -> None:
        selection = Manipulator('<div title="t"><b>x</b> y</div>')
        self.assertEqual(selection.text(), 'x y')
        self.assertEqual(selection.html(), '<b>x</b> y')
        self.assertEqual(selection.get_inner_html(), '<b>x</b> y')
        self.assertEqual(selection.outer_html(), '<div title="t"><b>x</b> y</div>')
        self.assertEqual(str(selection), '<div title="t"><b>x</b> y</div>')
        self.assertEqual(selection.attr('title'), 't')
        self.assertIsNone(selection.get_attribute('missing'))

    def test_reading_empty_selection(self) -> None:
        empty = Manipulator()
        self.assertEqual(empty.text(default=''), '')
        self.assertEqual(empty.html(default='none'), 'none')
        self.assertEqual(str(empty), '')
        with self.assertRaises(EmptySelectionError):
            empty.text()
        with self.assertRaises(EmptySelectionError):
            empty.html()
        with self.assertRaises(EmptySelectionError):
            empty.attr('id')

    def test_attr_of_text_node(self) -> None:
        self.assertIsNone(Manipulator('text').attr('id'))


class TestInsertion(unittest.TestCase):
    def setUp(self) -> None:
        self.page = Manipulator(PAGE)
        self.box = self.page.find('#box')
        self.paragraphs = self.page.find('p')

    def box_children(self):
        return tag_names(self.box[0].child_nodes)

    def test_append_fans_out_independent_copies(self) -> None:
        self.paragraphs.append('<span>x</span>')
        spans = self.page.find('span')
        self.assertEqual(len(spans), 2)
        self.assertIsNot(spans[0], spans[1])
        self.assertIs(spans[0].parent_node, self.paragraphs[0])
        self.assertIs(spans[1].parent_node, self.paragraphs[1])

        spans.first().set_text('changed')
        self.assertEqual(spans.last().text(), 'x')

    def test_moving_existing_node_to_several_places(self) -> None:
        page = Manipulator('<html><body><ul><li>a</li><li>b</li></ul><p id="m">m</p></body></html>')
        moved = page.find('#m')
        page.find('li').append(moved)

        self.assertEqual(tag_names(page.find('body').children()), ['ul'])
        self.assertEqual(len(page.find('li > p')), 2)
        self.assertEqual(len(moved), 2)
        self.assertIs(moved[0].parent_node, page.find('li')[0])

    def test_prepend(self) -> None:
        self.box.prepend('<h2>H</h2>')
        self.assertEqual(self.box_children(), ['h2', 'p', 'p'])

    def test_after(self) -> None:
        self.paragraphs.first().after('<hr><em>e</em>')
        self.assertEqual(self.box_children(), ['p', 'hr', 'em', 'p'])

    def test_after_fans_out_independent_copies(self) -> None:
        self.paragraphs.after('<em class="e">e</em>')
        self.assertEqual(self.box_children(), ['p', 'em', 'p', 'em'])

        copies = self.page.find('em')
        copies.first().add_class('changed').set_text('x')
        self.assertEqual(copies.last().attr('class'), 'e')
        self.assertEqual(copies.last().text(), 'e')

    def test_before(self) -> None:
        self.paragraphs.before('<hr>')
        self.assertEqual(self.box_children(), ['hr', 'p', 'hr', 'p'])

    def test_content_selection_holds_inserted_nodes(self) -> None:
        content = Manipulator('<i>i</i>')
        original = content[0]
        self.paragraphs.append(content)
        self.assertEqual(len(content), 2)
        self.assertIsNot(content[0], original)
        self.assertIs(content[0].owner_document, self.box[0].owner_document)

    def test_replace_with(self) -> None:
        first = self.paragraphs.first()
        result = first.replace_with('<h1>T</h1>')
        self.assertIs(result, first)
        self.assertIsNone(first[0].parent_node)
        self.assertEqual(self.box_children(), ['h1', 'p'])

    def test_replace_with_several_nodes(self) -> None:
        self.paragraphs.replace_with('<b>1</b><i>2</i>')
        self.assertEqual(self.box_children(), ['b', 'i', 'b', 'i'])

    def test_append_to(self) -> None:
        inserted = Manipulator('<em>e</em>').append_to(self.paragraphs)
        self.assertEqual(len(inserted), 2)
        self.assertEqual(len(self.page.find('p > em')), 2)
        self.assertIs(inserted[1].parent_node, self.paragraphs[1])

    def test_prepend_to(self) -> None:
        Manipulator('<em>e</em>').prepend_to(self.box)
        self.assertEqual(self.box_children(), ['em', 'p', 'p'])

    def test_insert_after(self) -> None:
        inserted = Manipulator('<hr>').insert_after(self.paragraphs)
        self.assertEqual(len(inserted), 2)
        self.assertEqual(self.box_children(), ['p', 'hr', 'p', 'hr'])

    def test_insert_before(self) -> None:
        Manipulator('<hr>').insert_before(self.paragraphs.last())
        self.assertEqual(self.box_children(), ['p', 'hr', 'p'])

    def test_replace_all(self) -> None:
        inserted = Manipulator('<i>i</i>').replace_all(self.paragraphs)
        self.assertEqual(len(inserted), 2)
        self.assertEqual(self.box_children(), ['i', 'i'])
        self.assertEqual(len(self.page.find('p')), 0)

    def test_foreign_content_is_imported(self) -> None:
        other = Manipulator('<html><body><section><b>b</b></section></body></html>')
        section = other.find('section')
        self.box.append(section)
        self.assertEqual(len(other.find('section')), 1)
        self.assertEqual(len(self.page.find('#box > section > b')), 1)

    def test_append_fragment_keeps_inline_spacing(self) -> None:
        self.box.append('<p>Hello <b>big</b> <i>world</i></p>')
        self.assertEqual(self.page.find('p').last().text(), 'Hello big world')

    def test_parent_check_runs_before_any_move(self) -> None:
        orphan = self.page.get_dom_document().create_element('p')
        selection = Manipulator(self.paragraphs.first())
        selection.add_node(orphan)
        with self.assertRaises(NoParentElementError):
            selection.after('<span>x</span>')
        with self.assertRaises(NoParentElementError):
            Manipulator('<span>y</span>').insert_after(selection)
        self.assertEqual(len(self.page.find('span')), 0)
        self.assertEqual(self.box_children(), ['p', 'p'])

    def test_sibling_insertion_needs_parent(self) -> None:
        element = Document().create_element('div')
        for operation in ('after', 'before', 'replace_with'):
            with self.assertRaises(NoParentElementError):
                getattr(Manipulator(element), operation)('<p>x</p>')
        with self.assertRaises(NoParentElementError):
            Manipulator('<p>x</p>').insert_after(element)

    def test_insertion_without_document(self) -> None:
        from dom_manipulator.dom import Element
        with self.assertRaises(DocumentNotFoundError):
            Manipulator(Element('orphan')).append('<p>x</p>')


class TestWrapping(unittest.TestCase):
    def setUp(self) -> None:
        self.page = Manipulator(PAGE)
        self.box = self.page.find('#box')
        self.paragraphs = self.page.find('p')

    def test_wrap_each_node(self) -> None:
        self.paragraphs.wrap('<section><article></article></section>')
        self.assertEqual(tag_names(self.box[0].child_nodes), ['section', 'section'])
        self.assertEqual(len(self.page.find('section > article > p')), 2)

        for section in self.page.find('section'):
            self.assertEqual(len(Manipulator(section).find('p')), 1)

    def test_wrap_then_unwrap_restores_parent(self) -> None:
        self.paragraphs.wrap('<div class="w"></div>')
        self.assertEqual(len(self.page.find('.w > p')), 2)

        self.paragraphs.unwrap()
        self.assertIs(self.paragraphs[0].parent_node, self.box[0])
        self.assertEqual(tag_names(self.box[0].child_nodes), ['p', 'p'])
        self.assertEqual(self.box.text(), 'OneTwo')

    def test_unwrap_removes_shared_parent_once(self) -> None:
        self.paragraphs.unwrap()
        body = self.page.find('body')
        self.assertEqual(tag_names(body[0].child_nodes), ['p', 'p'])

    def test_wrap_all(self) -> None:
        self.paragraphs.wrap_all('<div class="all"><span></span></div>')
        wrapper = self.page.find('.all')
        self.assertEqual(len(wrapper), 1)
        self.assertEqual(tag_names(self.box[0].child_nodes), ['div'])
        self.assertEqual(len(self.page.find('.all > span > p')), 2)

    def test_wrap_all_requires_same_parent(self) -> None:
        page = Manipulator('<html><body><div><p>1</p></div><div><p>2</p></div></body></html>')
        with self.assertRaises(DifferentParentsError):
            page.find('p').wrap_all('<section></section>')

    def test_wrap_inner(self) -> None:
        self.box.wrap_inner('<main></main>')
        self.assertEqual(tag_names(self.box[0].child_nodes), ['main'])
        self.assertEqual(len(self.page.find('main > p')), 2)

    def test_wrap_inner_without_children(self) -> None:
        self.paragraphs.make_empty().wrap_inner('<b></b>')
        self.assertEqual(len(self.page.find('p > b')), 2)

    def test_wrap_with_empty_content(self) -> None:
        with self.assertRaises(EmptySelectionError):
            self.paragraphs.wrap(Manipulator())

    def test_unwrap_inner(self) -> None:
        self.box.unwrap_inner()
        self.assertEqual(tag_names(self.page.find('body')[0].child_nodes), ['p', 'p'])

    def test_unwrap_inner_needs_parent_element(self) -> None:
        with self.assertRaises(NoParentElementError):
            Manipulator(PAGE).unwrap_inner()

    def test_wrap_needs_parent(self) -> None:
        element = Document().create_element('p')
        with self.assertRaises(NoParentElementError):
            Manipulator(element).wrap('<div></div>')

    def test_wrap_leaves_tree_alone_when_a_node_has_no_parent(self) -> None:
        orphan = self.page.get_dom_document().create_element('p')
        selection = Manipulator(self.paragraphs.first())
        selection.add_node(orphan)
        with self.assertRaises(NoParentElementError):
            selection.wrap('<div class="w"></div>')
        self.assertEqual(len(self.page.find('.w')), 0)
        self.assertIs(self.paragraphs[0].parent_node, self.box[0])

    def test_sibling_traversal_on_wide_list(self) -> None:
        page = Manipulator('<html><body><ul>' + '<li>x</li>' * 2000 + '</ul></body></html>')
        self.assertEqual(len(page.find('li + li')), 1999)
        self.assertEqual(len(page.find('li').first().next_all()), 1999)
        page.find('li').eq(1000).before('<li class="new">n</li>')
        self.assertEqual(len(page.find('.new ~ li')), 1000)
        self.assertEqual(len(page.find('.new').previous_all()), 1000)


class TestMutation(unittest.TestCase):
    def setUp(self) -> None:
        self.page = Manipulator(PAGE)
        self.paragraphs = self.page.find('p')

    def test_remove(self) -> None:
        self.paragraphs.remove()
        self.assertEqual(len(self.paragraphs), 0)
        self.assertEqual(len(self.page.find('p')), 0)

    def test_remove_keeps_nodes_without_parent_element(self) -> None:
        self.page.remove()
        self.assertEqual(len(self.page), 0)

    def test_make_empty_and_set_text(self) -> None:
        self.paragraphs.make_empty()
        self.assertEqual(self.paragraphs.get_combined_text(), '')
        self.paragraphs.set_text('<b>')
        self.assertEqual(self.paragraphs.html(), '&lt;b&gt;')
        self.assertEqual(len(self.page.find('b')), 0)

    def test_set_inner_html_fans_out(self) -> None:
        self.paragraphs.set_inner_html('<b>x</b>')
        bold = self.page.find('b')
        self.assertEqual(len(bold), 2)
        self.assertIsNot(bold[0], bold[1])
        self.assertEqual(self.paragraphs.html(), '<b>x</b>')

    def test_attributes(self) -> None:
        self.paragraphs.set_attribute('data-n', '1')
        self.assertEqual(self.paragraphs.last().attr('data-n'), '1')
        self.paragraphs.remove_attribute('data-n')
        self.assertIsNone(self.paragraphs.attr('data-n'))

    def test_make_clone(self) -> None:
        clones = self.paragraphs.make_clone()
        self.assertEqual(len(clones), 2)
        self.assertIsNot(clones[0], self.paragraphs[0])
        self.assertIsNone(clones[0].parent_node)
        self.assertEqual(clones.text(), 'One')

        copied = copy.copy(self.paragraphs)
        self.assertIsNot(copied[1], self.paragraphs[1])


class TestClasses(unittest.TestCase):
    def setUp(self) -> None:
        self.selection = Manipulator('<p class="a">1</p><p>2</p>')

    def test_add_class(self) -> None:
        self.selection.add_class('b c')
        self.assertEqual(self.selection.first().attr('class'), 'a b c')
        self.assertEqual(self.selection.last().attr('class'), 'b c')
        self.selection.add_class('a')
        self.assertEqual(self.selection.first().attr('class'), 'a b c')

    def test_has_class(self) -> None:
        self.assertTrue(self.selection.has_class('a'))
        self.assertFalse(self.selection.has_class('z'))

    def test_remove_class_drops_empty_attribute(self) -> None:
        self.selection.remove_class('a')
        self.assertFalse(self.selection[0].has_attribute('class'))

    def test_toggle_twice_restores(self) -> None:
        before = [node.get_attribute('class') for node in self.selection]
        self.selection.toggle_class('a b')
        self.assertEqual(self.selection.first().attr('class'), 'b')
        self.assertEqual(self.selection.last().attr('class'), 'a b')
        self.selection.toggle_class('a b')
        self.assertEqual([node.get_attribute('class') for node in self.selection], before)

    def test_toggle_present_class_moves_it_last(self) -> None:
        selection = Manipulator('<p class="b a">x</p>')
        selection.toggle_class('b').toggle_class('b')
        self.assertEqual(selection.attr('class'), 'a b')

    def test_toggle_empty_class_attribute_removes_it(self) -> None:
        selection = Manipulator('<p class="">x</p>')
        selection.toggle_class('a').toggle_class('a')
        self.assertFalse(selection[0].has_attribute('class'))

    def test_text_nodes_are_skipped(self) -> None:
        selection = Manipulator('text <p>x</p>')
        selection.add_class('c')
        self.assertEqual(selection.last().attr('class'), 'c')


class TestStyles(unittest.TestCase):
    def test_set_and_get(self) -> None:
        selection = Manipulator('<div style="color: red; margin: 0"></div>')
        self.assertEqual(selection.get_style('color'), 'red')
        self.assertIsNone(selection.get_style('padding'))

        selection.set_style('padding', '1px')
        self.assertEqual(selection.attr('style'), 'color: red;margin: 0;padding: 1px;')

    def test_clear_removes_key_then_attribute(self) -> None:
        selection = Manipulator('<div style="color: red; margin: 0"></div>')
        selection.set_style('margin', '')
        self.assertEqual(selection.attr('style'), 'color: red;')
        selection.set_style('color', '')
        self.assertFalse(selection[0].has_attribute('style'))

    def test_style_on_element_without_style(self) -> None:
        selection = Manipulator('<div></div>')
        self.assertIsNone(selection.get_style('color'))
        selection.set_style('color', 'blue')
        self.assertEqual(selection.attr('style'), 'color: blue;')


class TestFactories(unittest.TestCase):
    def setUp(self) -> None:
        self.page = Manipulator(PAGE)

    def test_create_element(self) -> None:
        link = self.page.create_element('a', 'link', {'href': '/x'})
        self.assertIs(link.owner_document, self.page.get_dom_document())
        self.assertIsNone(link.parent_node)
        self.assertEqual(Manipulator(link).outer_html(), '<a href="/x">link</a>')

    def test_create_element_with_markup_children(self) -> None:
        element = self.page.create_element('div', '<b>1</b><i>2</i>')
        self.assertEqual(tag_names(element.child_nodes), ['b', 'i'])

    def test_create_comment_and_cdata(self) -> None:
        self.assertEqual(self.page.create_comment('c').node_type, NodeType.COMMENT_NODE)
        self.assertEqual(self.page.create_cdata('d').node_type, NodeType.CDATA_SECTION_NODE)

    def test_factories_need_document(self) -> None:
        with self.assertRaises(DocumentNotFoundError):
            Manipulator().create_element('div')
        with self.assertRaises(DocumentNotFoundError):
            Manipulator('text').get_dom_document()


class TestRendering(unittest.TestCase):
    def test_merge_complete_document(self) -> None:
        page = Manipulator('<!DOCTYPE html><html><head></head><body><p>x</p></body></html>')
        self.assertEqual(page.merge_to_string(),
                         '<!DOCTYPE html>\n<html><head></head><body><p>x</p></body></html>\n')

    def test_merge_nodes(self) -> None:
        self.assertEqual(Manipulator('<p>a</p><br><p>b</p>').merge_to_string(), '<p>a</p><br><p>b</p>')

    def test_merge_xml(self) -> None:
        selection = Manipulator()
        selection.add_content('<root><item/></root>', 'text/xml')
        selection.append(selection.create_cdata('a<b'))
        self.assertEqual(selection.merge_to_string(), '<root><item/><![CDATA[a<b]]></root>')
