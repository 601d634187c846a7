"""Navigator SecureKV Meta information.
   Navigator SecureKV stores sensitive, expiring values (tokens, session data)
   on top of an encrypted key-value primitive.
"""
__title__ = 'navigator_securekv'
__description__ = (
   'Navigator SecureKV is a typed, namespaced and expiring store '
   'for sensitive values on top of encrypted storage.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-securekv'
