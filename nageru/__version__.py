NAGERU_VERSION = '1.0.0'

USER_AGENT = f'nageru/{NAGERU_VERSION}'
