# SPDX-License-Identifier: Apache-2.0
"""
Vector Wire Tests

Exchange-core tests (completion context, readiness gate, reader, status
parsing, controller) and Qdrant caller-layer tests, all against loopback
sockets.
"""
