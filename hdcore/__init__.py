#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"__init__ module for the hdcore package."

name = "hdcore"
__version__ = "2026.10.1"
__author__ = "The hdcore developers"
__author_email__ = "devs@hdcore.dev"
__copyright__ = "Copyright (C) 2026 The hdcore developers"
__license__ = "MIT License"
