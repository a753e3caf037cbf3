#!/usr/bin/env python

import sys
import time as time
import argparse
import logging
import wrapOQ as woq

logger = logging.getLogger(__name__)


def parseArgs(argv=None):
    parser = argparse.ArgumentParser(
        description='Tabulate Thingbaijam et al. (2017) magnitude-area scaling relations')
    parser.add_argument('--calc', '-c', action='store', required=True,
        dest='calcconf', help='Calculation configuration file')
    parser.add_argument('--rake', '-r', action='store', type=float, default=None,
        dest='rake', help='Rake in degrees, overrides the configuration file')
    parser.add_argument('--regime', action='store', choices=['crustal', 'interface'], default=None,
        dest='regime', help='Tectonic regime (TMG2017 only), overrides the configuration file')
    return parser.parse_args(argv)


def makeScalingTable(args, fout=sys.stdout):
    '''
    Evaluate the configured scaling relation and write the table.
    Args:
    - args: parsed command line arguments
    - fout: open file for the table
    Return:
    - Numpy array with columns input, median, standard deviation
    '''
    calcconf = woq.importConfig(args.calcconf)
    if args.rake is not None:
        calcconf['scaling_relation']['rake'] = args.rake
    if args.regime is not None:
        calcconf['scaling_relation']['regime'] = args.regime
    scalrel = woq.getScalingRelation(calcconf)
    table = woq.computeScalingTable(scalrel, calcconf['table'])
    if calcconf['table'].get('direction', 'mag2area') == 'mag2area':
        hstr = '%s\nmag area_km2 sigma_log10area' % scalrel.get_name()
    else:
        hstr = '%s\narea_km2 mag sigma_mag' % scalrel.get_name()
    woq.np.savetxt(fout, table, fmt='%.6f', header=hstr)
    return table


if __name__ == "__main__":
    import logging.config
    from DEFLOG import DEFLOG
    DEFLOG['handlers']['fileHandler']['filename'] = \
            'makeScalingTable_%s.log' % time.strftime('%y%m%dT%H%M%S', time.gmtime(time.time()))
    logging.config.dictConfig(DEFLOG)

    args = parseArgs()
    try:
        makeScalingTable(args)
    except (KeyError, ValueError) as err:
        logger.error(f'Scaling table failed: {err}')
        sys.exit(f'Error: {err}')
