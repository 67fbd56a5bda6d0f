from __future__ import annotations

# Flat field mapping exchanged with the gateway. Ordering is irrelevant; it is
# imposed only when signing.
Params = dict[str, str]
