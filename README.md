# rtrtool

Building blocks for RPKI-to-Router (RTR) client tools: parsing a client's
command line, formatting the lines it prints for prefix, router-key and ASPA
updates, exporting ROA records through simple mustache templates, and
parsing and answering route origin validation queries in a line-based
protocol.

The package uses only the standard library and supports Python 3.10 and
later.

## What the package does not do

It does not speak the RTR protocol, open connections to cache servers,
keep prefix, router-key or ASPA tables, or decide the validation state of a
route. It has no command of its own. The functions here parse input and
produce text; the records, states and update events they work on have to
come from elsewhere.

## Modules

### `rtrtool.templates`

Export templates are looked up by name. The built-in ones are `default`,
`csv`, `csvwithheader` and `json`; any other name is treated as the path of
a readable template file.

```python
from rtrtool.templates import get_template, template_names, describe_templates, TemplateError

print(template_names())            # ['default', 'csv', 'csvwithheader', 'json']
text = get_template("csv")         # the template text
print(describe_templates(None))    # one name per line
print(describe_templates("json"))  # the text of the json template ("" for an unknown name)

try:
    get_template("no-such-template")
except TemplateError as exc:
    print(exc)                     # Template "no-such-template" not found
```

### `rtrtool.exporter`

Renders `RoaRecord` values through a template. A `RoaRecord` holds a
`prefix` (an `ipaddress` address; a string is converted), `min_len`,
`max_len` and `asn`. Inside the `roas` section the tags `prefix`, `length`,
`maxlen` and `origin` are filled from each record, and the `last` section is
entered for the final record only (the `json` template uses
`{{^last}},{{/last}}` to place commas). With no records the `roas` section
is skipped.

```python
import sys
from rtrtool.exporter import RoaRecord, unique_records, render, write_export
from rtrtool.templates import get_template

records = [
    RoaRecord("192.0.2.0", 24, 24, 64496),
    RoaRecord("2001:db8::", 32, 48, 64497),
    RoaRecord("192.0.2.0", 24, 24, 64496),
]
print(render(get_template("default"), unique_records(records)))
write_export(get_template("json"), records, sys.stdout)  # de-duplicates first
```

`unique_records` drops duplicates and keeps the order of first
occurrences. A malformed template, or a variable used outside the `roas`
section, raises `TemplateSyntaxError`.

### `rtrtool.rov`

The query side of a route origin validation helper. Each input line holds
an address, a prefix length and an origin AS number separated by spaces;
the answer line has the form `IP MASK ASN|ROA, ...|CODE`, where each ROA is
`ASN PREFIX MINLEN MAXLEN` and the code is `0` valid, `1` not found, `2`
invalid, or `-1` when no state is given.

```python
from rtrtool.exporter import RoaRecord
from rtrtool.rov import parse_query, format_response, ValidationState, QueryError

try:
    query = parse_query("192.0.2.0 24 64496")
except QueryError as exc:
    print(exc)
else:
    roa = RoaRecord("192.0.2.0", 24, 24, 64496)
    print(format_response(query, [roa], ValidationState.VALID))
    # 192.0.2.0 24 64496|64496 192.0.2.0 24 24|0
```

`parse_query` raises `QueryError` with the message `Arguments required: IP
Mask ASN` when the line does not carry exactly three arguments, and
`Error: Invalid ip addr`, `Error: Invalid mask` or `Error: Invalid asn` for
a bad field. `count_separators` tells how many argument separators a raw
line holds.

### `rtrtool.cli`

Parses the arguments that follow a client's program name: global options
(`-k`, `-p`, `-a`, `-s`, `-e`, `-o file`, `-t template`, `-l`) followed by
one or more socket descriptions, `tcp [-kpa] [-b bindaddr] <host> <port>`
or, when SSH is enabled, `ssh [-kpawr] [-b bindaddr] <host> <port>
<username> (<private_key> | <password>) [<host_key>]`. Host names are
checked by resolving them.

```python
from rtrtool.cli import parse_cli, usage, CliError

try:
    options = parse_cli(["-p", "tcp", "localhost", "323"], ssh_enabled=False)
except CliError as exc:
    print(exc)
    if exc.show_usage:
        print(usage("rtrclient", ssh_enabled=False))
else:
    print(options.sockets[0].host, options.sockets[0].port)
```

The result is a `ClientOptions` holding one `SocketConfig` per socket, the
global flags, and any `warnings` (for example when an SSH credential is
taken as a password). With `-l`, parsing stops after the global options and
`list_templates` is set. The checks `is_numeric`, `is_valid_port_number`,
`is_resolvable_host`, `is_readable_file` and `is_utf8` can be used on their
own.

### `rtrtool.formatting`

Produces the text a client prints for status changes and updates:
`format_status`, `format_pfx_header`, `format_pfx_update`,
`format_spki_update` and `format_aspa_update`, the last taking an
`AspaOperation` (`ADD` or `REMOVE`; `None` is shown as `?`).

```python
from rtrtool.exporter import RoaRecord
from rtrtool.formatting import AspaOperation, format_pfx_update, format_aspa_update

print(format_pfx_update(RoaRecord("192.0.2.0", 24, 24, 64496), added=True), end="")
print(format_aspa_update(64496, [64497, 64498], AspaOperation.ADD, "localhost", "323"), end="")
```

## Running the tests

Install the `test` extra and run `pytest` from the project directory.