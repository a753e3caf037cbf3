#!/usr/bin/env python

#############
# N.B. Helpers for selecting and evaluating the openquake-compatible
# Thingbaijam et al. (2017) magnitude-area scaling relations
#############

# stdlib imports
import logging
from json import JSONDecoder
import numpy as np

# local imports
import Thingbaijam_2017

logger = logging.getLogger(__name__)


def getAvailableScalingRelations():
    '''
    Lists the scaling relations that can be requested by name in a configuration file.
    Return:
    - Dictionary of name: ScalingRelation class
    '''
    return {
        'TMG2017': Thingbaijam_2017.TMG2017,
        'TMG2017Crustal': Thingbaijam_2017.TMG2017Crustal,
        'TMG2017Subduction': Thingbaijam_2017.TMG2017Subduction,
    }


def getScalingRelation(conf):
    '''
    Returns the ScalingRelation class object using configuration file input, with rake
    and regime (unified relation only) set from the same section.
    Args:
    - conf: configuration dictionary
    Return:
    - ScalingRelation class object
    '''
    srconf = conf['scaling_relation']
    available = getAvailableScalingRelations()
    name = srconf.get('scalrel', 'TMG2017')
    if name not in available:
        logger.error(f'Scaling relation {name} is not one of {", ".join(available)}')
        raise ValueError(f'Unsupported scaling relation {name}')
    scalrel = available[name]()
    configureScalingRelation(scalrel, srconf)
    logger.info(f'Scaling relation: {scalrel.get_name()}')
    return scalrel


def configureScalingRelation(scalrel, srconf):
    '''
    Set rake and regime on a scaling relation. A missing or null rake leaves the
    relation unavailable, i.e. all estimates are NaN.
    Args:
    - scalrel: ScalingRelation class object
    - srconf: 'scaling_relation' section of the configuration
    '''
    if 'regime' in srconf:
        if not hasattr(scalrel, 'set_regime'):
            logger.error(f'{scalrel.__class__.__name__} does not take a regime')
            raise ValueError(f'Regime is not supported by {scalrel.__class__.__name__}')
        scalrel.set_regime(srconf['regime'])
    try:
        scalrel.set_rake(srconf.get('rake'))
    except ValueError as err:
        logger.error(f'Rake rejected by {scalrel.__class__.__name__}: {err}')
        raise
    return scalrel


def importConfig(fname):
    '''
    Imports a configuration file into a python dictionary.
    Configuration file format expected (json).
    Lines beginning with # are ignored.
    Args:
    - fname: filename
    Return:
    - Dictionary with contents of configuration file
    '''
    with open(fname, 'r') as fin:
        text = fin.read()
    ntext = ''
    for l in text.split('\n'):
        l = l.rstrip().lstrip()
        if l.startswith('#'):
            continue
        ntext += l
    return JSONDecoder().decode(ntext)


def computeScalingTable(scalrel, tabconf):
    '''
    Evaluate a scaling relation over a range of magnitudes or areas.
    Args:
    - scalrel: configured ScalingRelation class object
    - tabconf: 'table' section of the configuration, with direction
      ('mag2area' or 'area2mag'), min, max and step
    Return:
    - Numpy array with columns input, median, standard deviation
    '''
    direction = tabconf.get('direction', 'mag2area')
    x = np.arange(tabconf['min'], tabconf['max'] + tabconf['step']/2., tabconf['step'])
    if direction == 'mag2area':
        median = scalrel.get_median_area(x)
        sigma = scalrel.get_std_dev_area()
    elif direction == 'area2mag':
        median = scalrel.get_median_mag(x)
        sigma = scalrel.get_std_dev_mag()
    else:
        logger.error(f'Table direction {direction} is incorrectly specified')
        raise ValueError(f'Unsupported table direction {direction}')
    logger.info(f'{direction}: {len(x)} values from {x[0]} to {x[-1]}')
    return np.column_stack([x, median, np.full(len(x), sigma)])
