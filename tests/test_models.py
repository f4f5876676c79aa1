from datetime import datetime, timezone
import pytest
from agentshelf.models import Resource, ResourceType


def test_resource_type_parse():
    assert ResourceType.parse('skills') == ResourceType.SKILLS
    assert ResourceType.parse(' MCP_Servers ') == ResourceType.MCP_SERVERS
    assert ResourceType.parse(ResourceType.HOOKS) == ResourceType.HOOKS
    with pytest.raises(ValueError):
        ResourceType.parse('plugins')


def test_resource_type_labels():
    assert [t.label for t in ResourceType] == ['Agents', 'Subagents', 'Skills', 'MCP Servers', 'Hooks',
                                               'System Prompts']
    assert ResourceType.SYSTEM_PROMPTS.words == 'system prompts'
    assert ResourceType.AGENTS.words == 'agents'


def test_matches(make_resource):
    resource = make_resource('r1', 'Code Reviewer', content='Checks PRs for Style issues')
    assert resource.matches('')
    assert resource.matches('review')
    assert resource.matches('REVIEW')
    assert resource.matches('style')
    assert not resource.matches('deploy')
    assert not resource.matches('reviewer checks')


def test_as_json(make_resource):
    resource = make_resource('r1', 'Bot', rtype=ResourceType.MCP_SERVERS, content='hi',
                             updated=datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    assert resource.as_json() == {
        'id': 'r1',
        'name': 'Bot',
        'content': 'hi',
        'type': 'mcp_servers',
        'folder_path': 'mcp_servers',
        'created': '2020-01-01T00:00:00+00:00',
        'updated': '2020-01-02T03:04:05+00:00',
    }
    assert Resource.from_json(resource.as_json()) == resource


def test_from_json_timestamps():
    resource = Resource.from_json({
        'id': 'r1',
        'name': 'Bot',
        'type': 'hooks',
        'created': '2020-01-01T00:00:00',
        'updated': '2020-01-02T00:00:00.250Z',
    })
    assert resource.created == datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert resource.updated == datetime(2020, 1, 2, 0, 0, 0, 250000, tzinfo=timezone.utc)
    assert resource.content == ''
    assert resource.folder_path == 'hooks'


def test_from_json_malformed():
    with pytest.raises(KeyError):
        Resource.from_json({'id': 'r1', 'type': 'hooks'})
    with pytest.raises(ValueError):
        Resource.from_json({'id': 'r1', 'name': 'x', 'type': 'hooks', 'created': 'yesterday',
                            'updated': 'today'})


def test_from_json_camel_case():
    resource = Resource.from_json({
        'id': 'r1',
        'name': 'GitHub',
        'content': '# GitHub',
        'type': 'mcp_servers',
        'folderPath': 'mcp_servers',
        'createdAt': '2024-03-01T10:00:00.000Z',
        'updatedAt': '2024-03-02T10:00:00.000Z',
    })
    assert resource.type == ResourceType.MCP_SERVERS
    assert resource.folder_path == 'mcp_servers'
    assert resource.created == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
    assert resource.updated == datetime(2024, 3, 2, 10, tzinfo=timezone.utc)
