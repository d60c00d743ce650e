# rvps

A Reference Value Provider Service. It receives provenance messages, verifies
them with an extractor chosen by the message type, stores the reference values
found inside, and serves the unexpired values over gRPC. It also carries a few
admin helpers for a Key Broker Service.

## Install

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## Running the service

    rvps --config /etc/rvps.json --address 127.0.0.1:50003

Both options have defaults: the configuration is read from `/etc/rvps.json`
and the server listens on `127.0.0.1:50003`. The address must be an IP
literal with a port (`127.0.0.1:50003`, `[::1]:50003`); host names are
rejected. If the configuration file cannot be read, a warning is logged and
the default configuration is used.

A configuration file is JSON (`.json`) or TOML (`.toml`). A path without one
of these extensions is looked up with each of them appended. It selects the
storage backend:

```json
{
  "storage": {
    "type": "LocalJson",
    "file_path": "/var/lib/rvps/reference_values.json"
  }
}
```

`type` is one of:

- `LocalFs` – `file_path` is a directory; the values are kept in an SQLite
  database file named `db` inside it. Default directory:
  `/opt/confidential-containers/attestation-service/reference_values`.
- `LocalJson` – `file_path` is a single JSON file holding a list of reference
  values; it is created as `[]` if missing. Default file:
  `/opt/confidential-containers/attestation-service/reference_values.json`.

When `storage` is missing, `LocalFs` is used with its default path.

## Talking to the service

Register the reference values held in a provenance message:

    rvps-tool register --addr http://127.0.0.1:50003 --path provenance.json

List the reference values that are currently valid:

    rvps-tool query --addr http://127.0.0.1:50003

`--addr` defaults to `http://127.0.0.1:50003`; an `https://` address uses TLS,
and a bare `host:port` is used as given. Both commands exit with status 1 and
log the error when the call fails.

A provenance message is a JSON document:

```json
{
  "version": "0.1.0",
  "type": "sample",
  "payload": "<base64 of the provenance>"
}
```

`version` defaults to `0.1.0`; any other version is rejected. Supported types:

- `sample` – the payload is base64 of a JSON object mapping names to values.
  Nothing is verified; meant for testing.
- `swid` – the payload is base64 of a SWID / TCG RIM XML manifest. Every
  `Measurement` resource yields one reference value per `HashN` attribute,
  named `<manufacturer>.<model>.<version>.<measurement>.hashN`. Spaces in the
  manufacturer and dots in the version become underscores, and every dash in
  the name becomes an underscore.

A reference value registered under a name that already exists replaces the
old one. Reference values expire twelve months after they are registered;
expired values are left out of query results, which are a JSON object mapping
each name to its value.

## Using it as a library

- `rvps.client.register(address, message)` and `rvps.client.query(address)`
  call a running service; failures raise `rvps.errors.RvpsError`.
- `rvps.config.Config` loads a configuration (`Config.from_file`,
  `Config.from_dict`) and opens its storage backend with `to_storage()`.
- `rvps.core.Rvps` ties extractors and storage together through
  `verify_and_extract(message)` and `get_digests()`.
- `rvps.server.build_server(address, config)` returns a gRPC server and its
  bound port without starting it; `rvps.server.start(address, config)` serves
  until terminated.
- `rvps.reference_value.ReferenceValue` is the stored record, with
  `to_dict()` / `from_dict()` for its JSON form.

`rvps.kbs_client` holds admin helpers for a Key Broker Service:
`set_attestation_policy` (type defaults to `rego`, id to `default`),
`set_resource_policy`, `set_resource`, `set_sample_rv` and `get_rvs`. Each
signs a two-hour admin token with an Ed25519 private key in PEM form (see
`make_admin_token`), optionally trusts extra root certificates given as PEM
strings, and raises `KbsClientError` when the service does not answer with
HTTP 200.

## What it does not do

- There is no in-toto extractor; only `sample` and `swid` provenances are
  accepted.
- The Key Broker Service helpers cover admin calls only. Running attestation
  to obtain a token, and fetching secret resources with or without one, are
  not provided, and there is no command line for these helpers.