from agentshelf.models import ResourceType
from agentshelf.templates import default_content, templates_by_type


def test_builtin_template():
    assert default_content(ResourceType.AGENTS, 'Bot One') == (
        '# Bot One\n\nStart writing your agents configuration here...')
    assert default_content(ResourceType.MCP_SERVERS, 'GitHub') == (
        '# GitHub\n\nStart writing your mcp servers configuration here...')


def test_templates_by_type(fs):
    fs.create_file('/templates/b/skills.md.mako')
    fs.create_file('/templates/a/Skills.md.mako')
    fs.create_file('/templates/a/hooks.mako')
    fs.create_dir('/templates/a/agents.mako')
    assert templates_by_type({'/templates/**/*.mako'}) == {
        'skills': '/templates/a/Skills.md.mako',
        'hooks': '/templates/a/hooks.mako',
    }


def test_custom_template(fs):
    template = """---
kind: ${resource_type.label}
...
# ${name.upper()}

Describe when to use this ${type_words[:-1]}."""
    fs.create_file('/templates/skills.md.mako', contents=template)
    globs = {'/templates/*.mako'}
    assert default_content(ResourceType.SKILLS, 'Triage', globs) == """---
kind: Skills
...
# TRIAGE

Describe when to use this skill."""
    assert default_content(ResourceType.HOOKS, 'Lint', globs).startswith('# Lint\n')
