"""Navigator Vault Meta information.
   Navigator Vault encrypts password-manager records on the client
   with a key derived from the user's master password.
"""
__title__ = 'navigator_vault'
__description__ = (
   'Navigator Vault: client-side envelope encryption of password '
   'records and a configurable password generator.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-vault'
