import os
import warnings
import configparser

import appdirs

cwd = os.path.split(os.path.abspath(__file__))[0]
userdir = appdirs.user_data_dir("rtinterp", "rtinterp")
usercfg = os.path.join(userdir, "options.cfg")

# Read defaults from the package
config = configparser.ConfigParser()
config.read(os.path.join(cwd, 'defaults.cfg'))

# Update defaults with user-specified values in user config
files_successfully_read = config.read(usercfg)

# If user config doesn't exist, create it
if len(files_successfully_read) == 0:
    try:
        if not os.path.exists(userdir):
            os.makedirs(userdir)
        with open(usercfg, 'w') as fp:
            config.write(fp)
    except OSError as e:
        warnings.warn("Could not write user config %s: %s" % (usercfg, e))
