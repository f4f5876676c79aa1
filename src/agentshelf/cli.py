"""Command-line interface for agentshelf."""


import argparse
import asyncio
import json
import logging
import sys
from typing import Optional
from terminaltables import AsciiTable
from agentshelf.conf import AgentshelfConf
from agentshelf.export import export_resources
from agentshelf.models import Resource, ResourceType
from agentshelf.notify import Notification, Severity
from agentshelf.store import ResourceStore


def _print_notification(notification: Notification) -> None:
    out = sys.stderr if notification.severity == Severity.ERROR else sys.stdout
    print(notification.message, file=out)


def _print_resource(resource: Resource, content=True) -> None:
    print(f'id: {resource.id}')
    print(f'name: {resource.name}')
    print(f'type: {resource.type.value}')
    print(f'created: {resource.created}')
    print(f'updated: {resource.updated}')
    if content:
        print('content:')
        print(resource.content)


def _lookup(store: ResourceStore, name_or_id: str) -> Optional[Resource]:
    resource = store.get(name_or_id) or store.find(name_or_id)
    if not resource:
        print(f'No resource found: {name_or_id}', file=sys.stderr)
    return resource


async def _list(args, store: ResourceStore) -> int:
    resources = store.filter(args.query or '')
    if args.json:
        print(json.dumps([r.as_json() for r in resources]))
    elif args.table:
        data = [('Name', 'Type', 'Updated')]
        data.extend((r.name, r.type.label, r.updated.strftime('%Y-%m-%d %H:%M')) for r in resources)
        print(AsciiTable(data).table)
    else:
        for resource in resources:
            print(f'{resource.folder_path}/{resource.name}')
    return 0


async def _tree(args, store: ResourceStore) -> int:
    store.filter(args.query or '')
    for folder in store.tree():
        print(f'{folder.label} ({folder.count})')
        for resource in folder.resources:
            print(f'\t{resource.name}')
    return 0


async def _show(args, store: ResourceStore) -> int:
    resource = _lookup(store, args.resource[0])
    if not resource:
        return 1
    if args.json:
        print(json.dumps(resource.as_json()))
    else:
        _print_resource(resource)
    return 0


async def _new(args, store: ResourceStore) -> int:
    return 0 if await store.create(args.type[0], args.name[0]) else 1


async def _rename(args, store: ResourceStore) -> int:
    resource = _lookup(store, args.resource[0])
    if not resource:
        return 1
    return 0 if await store.update(resource.id, name=args.name[0]) else 1


async def _edit(args, store: ResourceStore) -> int:
    resource = _lookup(store, args.resource[0])
    if not resource:
        return 1
    if args.file:
        with open(args.file[0], 'r', encoding='utf-8') as file:
            content = file.read()
    else:
        content = sys.stdin.read()
    return 0 if await store.update(resource.id, content=content) else 1


async def _rm(args, store: ResourceStore) -> int:
    resource = _lookup(store, args.resource[0])
    if not resource:
        return 1
    return 0 if await store.delete(resource.id) else 1


async def _export(args, store: ResourceStore) -> int:
    written = export_resources(store.resources, args.dest[0])
    if args.json:
        print(json.dumps(written))
    else:
        for resource_id, path in written.items():
            print(f'Exported {store.get(resource_id).name} to {path}')
    return 0


def argparser() -> argparse.ArgumentParser:
    type_names = [t.value for t in ResourceType]

    parser = argparse.ArgumentParser()
    parser.set_defaults(func=None)
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging information to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_list = subs.add_parser('list', help='List resources, optionally only those whose name or content contains '
                                          'the query (ignoring case).')
    p_list.add_argument('query', nargs='?', help='Search text. If omitted, all resources are listed.')
    p_list_formats = p_list.add_mutually_exclusive_group()
    p_list_formats.add_argument('-j', '--json', help='Output as JSON.', action='store_true')
    p_list_formats.add_argument('-t', '--table', help='Format output as a table.', action='store_true')
    p_list.set_defaults(func=_list)

    p_tree = subs.add_parser('tree', help='List resources grouped by type, with counts.')
    p_tree.add_argument('query', nargs='?', help='Search text. If omitted, all resources are listed.')
    p_tree.set_defaults(func=_tree)

    p_show = subs.add_parser('show', help='Show a resource, including its content.')
    p_show.add_argument('resource', nargs=1, help='Name (case-insensitive) or id of the resource.')
    p_show.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_show.set_defaults(func=_show)

    p_new = subs.add_parser('new', help='Create a resource with starting content from its type\'s template.')
    p_new.add_argument('type', nargs=1, choices=type_names)
    p_new.add_argument('name', nargs=1, help='Name of the new resource. Must not match an existing name, '
                                             'ignoring case.')
    p_new.set_defaults(func=_new)

    p_rename = subs.add_parser('rename', help='Rename a resource.')
    p_rename.add_argument('resource', nargs=1, help='Name (case-insensitive) or id of the resource.')
    p_rename.add_argument('name', nargs=1, help='New name.')
    p_rename.set_defaults(func=_rename)

    p_edit = subs.add_parser('edit', help='Replace the content of a resource.')
    p_edit.add_argument('resource', nargs=1, help='Name (case-insensitive) or id of the resource.')
    p_edit.add_argument('-f', '--file', nargs=1, help='Read the new content from this file instead of stdin.')
    p_edit.set_defaults(func=_edit)

    p_rm = subs.add_parser('rm', help='Delete a resource.')
    p_rm.add_argument('resource', nargs=1, help='Name (case-insensitive) or id of the resource.')
    p_rm.set_defaults(func=_rm)

    p_export = subs.add_parser('export', help='Write every resource to a Markdown file with a YAML metadata '
                                              'header, in one folder per type. Existing files are not '
                                              'overwritten.')
    p_export.add_argument('dest', nargs=1, help='Folder to export into.')
    p_export.add_argument('-j', '--json', action='store_true',
                          help='Output as JSON. The output is an object whose keys are resource ids, and whose '
                               'values are the paths of the files written.')
    p_export.set_defaults(func=_export)

    return parser


async def _run(args, store: ResourceStore) -> int:
    await store.load()
    return await args.func(args, store)


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    if not args.func:
        parser.print_help()
        return 1
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.ERROR,
                        format='%(levelname)s %(name)s: %(message)s')
    with AgentshelfConf.for_user().instantiate() as store:
        store.notifier.subscribe(_print_notification)
        return asyncio.run(_run(args, store))
