from agentshelf.models import ResourceType
from agentshelf.view import Draft, ViewState, group_by_type


def test_draft_has_changes(make_resource):
    resource = make_resource('r1', 'One', content='body')
    draft = Draft.of(resource)
    assert draft == Draft('r1', 'One', 'body')
    assert not draft.has_changes(resource)
    draft.content = 'edited'
    assert draft.has_changes(resource)
    draft.content = 'body'
    draft.name = 'one'
    assert draft.has_changes(resource)


def test_toggles():
    view = ViewState()
    assert view.editor_mode and view.sidebar_open
    assert not view.toggle_editor_mode()
    assert not view.toggle_sidebar()
    assert view.toggle_editor_mode()
    assert view == ViewState(editor_mode=True, sidebar_open=False)


def test_group_by_type(make_resource):
    hook = make_resource('r1', 'Pre-commit', rtype=ResourceType.HOOKS)
    agent1 = make_resource('r2', 'Bot One')
    agent2 = make_resource('r3', 'Bot Two')
    folders = group_by_type([hook, agent1, agent2])
    assert [f.type for f in folders] == list(ResourceType)
    assert [(f.label, f.count) for f in folders] == [
        ('Agents', 2), ('Subagents', 0), ('Skills', 0), ('MCP Servers', 0), ('Hooks', 1), ('System Prompts', 0)]
    assert folders[0].resources == [agent1, agent2]
    assert folders[4].resources == [hook]
