# SPDX-License-Identifier: BUSL-1.1
"""graftpack - assemble a minimal single-binary container image with buildah."""

__version__ = "0.1.0"
