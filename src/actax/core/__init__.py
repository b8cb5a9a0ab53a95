"""
Core package aggregator for actax contracts
(payload descriptors, schema, partition, shapes, creators).

## Contracts (single source of truth)
- Payload — PayloadKind / PayloadDescriptor and the NO_PAYLOAD marker.
- Schema — ActionSchema, the ordered kind -> descriptor mapping.
- Partition — payload-bearing / payload-less split (sentinel or explicit strategy).
- Shapes — pydantic action models with ``type`` and, where applicable, ``payload``.
- Creators — exact creator signatures and validated creator callables.
- Taxonomy — the compiled facade over all of the above.
- Grammar/Hashing/Errors — kind naming, schema fingerprints, typed exceptions.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Derivations are pure; the same schema always yields equal partitions, shapes
  and signatures.

## Downstream usage
- actax.io — loads schema documents from TOML/JSON/YAML into ActionSchema.
- actax.codegen — renders a statically typed module from a Taxonomy.
- actax.cli — inspects, checks and compiles schema files.

## Examples
```python
from actax.core.payload import NO_PAYLOAD
from actax.core.taxonomy import Taxonomy

tax = Taxonomy({"SET_NAME": str, "SET_AGE": int, "LOG_OUT": NO_PAYLOAD})
tax.partition.without_payload  # ('LOG_OUT',)
tax.creator("SET_NAME")("Alice")  # SetName(type='SET_NAME', payload='Alice')
tax.creator("LOG_OUT")("x")  # raises ArityError
```
"""
