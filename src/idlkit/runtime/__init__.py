# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runtime support imported by generated client packages."""
