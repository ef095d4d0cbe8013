# agentchat

`agentchat` is the model behind a chat panel that talks to a coding agent. It
has no user interface. It holds the state and the rules, and your own front end
draws them. It has no dependencies outside the standard library.

## Modules

- **`agentchat.chatlog`**: the transcript. `ChatMessageLog` records `ChatMessage`
  rows with a `Role` of user, agent, tool, system or permission.
  - `append_agent_chunk` joins streamed chunks into the open agent message.
  - `end_agent_turn` closes the open agent message, and so does adding a user,
    tool or permission row.
  - `update_tool` updates the row of a known tool call id in place. For an
    unknown id it adds a new row.
  - `append_permission` returns a UUID that identifies the row from then on.
    `set_permission_state` moves the row to `PermissionState.ALLOWED` or
    `PermissionState.DENIED`.
  - `apply_session_update` routes a `SessionUpdate` to the right method.
  - Changes are announced through `on_changed` and `on_agent_turn_ended`. Use
    `connect` and `disconnect` on these to add and remove callbacks.
- **`agentchat.markdown`**: a small Markdown subset.
  - `parse_blocks` splits text into `Block`s. The kinds are paragraph, heading,
    fenced code, bullet list, ordered list, horizontal rule, and pipe table with
    per-column `Alignment`.
  - `render_inline` turns `**bold**`, `*italic*` and `` `code` `` into
    `<Markdown.Bold>…</>`-style tags. A literal `<` becomes a fullwidth `＜`.
  - `render` parses text and applies inline markup to every block.
- **`agentchat.context`**: prompt content.
  - `ContentBlock` is text, an inline resource or a resource link.
  - `AssetContextBuilderRegistry` picks a builder by asset class, subclasses
    included. When more than one builder matches, the one registered last is
    used. When none matches, the result is a resource link to the asset's
    `.uasset` file.
  - `register_builtin_builders` registers `build_blueprint_block`. That builder
    inlines a Blueprint dump as JSON and truncates it at the character cap.
- **`agentchat.composer`**: the chat input.
  - `ChatComposer` tracks context chips and the `@query` mention popup.
  - A chip added through an `@[Name]` token is dropped when the token is deleted
    from the text.
  - Helper functions: `find_mention_tokens`, `find_mention_query` and
    `filter_assets`. `filter_assets` matches names without regard to case and
    returns at most 25 results by default.
- **`agentchat.transcript`**: export and permissions.
  - `export_markdown` and `default_export_name` write the transcript out.
  - `format_args_preview` renders a tool call's arguments as indented JSON and
    cuts it at 1500 characters.
  - `PermissionRouter` turns permission requests into log rows and calls each
    completion with `PermissionOutcome.ALLOW` or `PermissionOutcome.DENY`.
    `deny_all` answers every request that is still pending.
- **`agentchat.rows`**: presentation rules for the message list.
  - Row appearance comes from `border_color`, `row_label`, `status_icon`,
    `permission_title`, `permission_outcome` and `body_is_markdown`.
  - `MessageListView` keeps which tool rows are expanded. It also keeps the list
    pinned to the bottom: after each change it repeats the scroll for a few
    `tick()` calls.
- **`agentchat.launch`**: starting the agent and reporting its state.
  - `resolve_launch` turns `AgentSettings` into a `LaunchSpec`:
    - `.cmd` and `.bat` files run through `cmd.exe /c`.
    - `.js` files run through `node`.
    - On Windows, a command with no extension is replaced by the first of
      `.cmd`, `.bat` or `.exe` that exists next to it.
    - With no command configured it raises `ValueError`.
  - `status_text` gives the header line for a `ClientState`.
- **`agentchat.settings`**: configuration.
  - `AgentSettings` holds:
    - the agent command and its extra arguments;
    - whether open assets are added automatically;
    - the Blueprint summary cap, 512 to 100000;
    - the request timeout, 0 to 3600;
    - the MCP server switch and port, 1024 to 65535.

    A value out of range raises `ValueError`.
  - `UserPreferences` keeps the `PermissionMode` (Read Only, Default, Full
    Access) and the chosen model. It stores them in an INI file, or in memory
    when no path is given.
- **`agentchat.session`**: `ChatSession` ties the pieces to an agent client.
  - `start()` resets the log and launches through the client.
  - `send()` builds the context blocks and sends the prompt.
  - The `on_*` methods take the client's events.
  - `model_choices`, `select_model` and `apply_saved_model` handle the
    preferred model.
  - `export()` saves the transcript as Markdown.

## Install

```
pip install .
pip install ".[test]"   # with the test dependencies
```

## Example

```python
from datetime import datetime

from agentchat.chatlog import ChatMessageLog
from agentchat.transcript import export_markdown

log = ChatMessageLog()
log.append_user("Summarise BP_Door", [])
log.append_agent_chunk("It opens ")
log.append_agent_chunk("when overlapped.")
log.end_agent_turn()

print(export_markdown(log.messages, datetime.now()))
```

```python
from agentchat.markdown import parse_blocks, render_inline

blocks = parse_blocks("# Title\n\n| a | b |\n|:-|-:|\n| 1 | 2 |")
print(render_inline("use **care** with `<T>`"))
```

## What it does not do

- There is no window or widget. Your front end draws the rows from the log and
  calls the package's methods.
- It has no agent client. `ChatSession` takes an object you supply with these
  members:
  - attributes `state`, `session_id`, `last_error` and `config_options`;
  - methods `start`, `set_mcp_server_url`, `send_prompt`, `set_config_option`,
    `cancel_prompt` and `stop`.

  The package itself never starts a process or opens a connection.
- It runs no MCP server. `AgentSettings.mcp_url()` only builds the URL that is
  handed to the client.
- It does not read assets.
  - Blueprint dumps come from the `dump_provider` callable you pass in.
  - Mention search results come from the `asset_source` callable given to
    `ChatComposer`.

## Tests

```
pytest
```