"""Common Locations - Reference geography of Tajikistan.

Loaded by `manage.py load_geography`. Each entry carries its translations;
the Russian title doubles as the node's primary title.
"""

GEOGRAPHY = [
    {
        'translations': {'tj': 'Душанбе', 'ru': 'Душанбе', 'eng': 'Dushanbe'},
        'description': 'Душанбе, республиканская столица, западный Таджикистан',
        'cities': [
            {
                'translations': {'tj': 'Душанбе', 'ru': 'Душанбе', 'eng': 'Dushanbe'},
                'description': 'Душанбе, республиканская столица',
                'suburbs': [
                    {'translations': {'tj': 'Сино', 'ru': 'Сино', 'eng': 'Sino'}},
                    {'translations': {'tj': 'Шоҳмансур', 'ru': 'Шохмансур', 'eng': 'Shohmansur'}},
                    {'translations': {'tj': 'Фирдавсӣ', 'ru': 'Фирдавси', 'eng': 'Firdavsi'}},
                    {'translations': {'tj': 'Исмоили Сомонӣ', 'ru': 'Исмоили Сомони', 'eng': 'Ismoili Somoni'}},
                ],
            },
        ],
    },
    {
        'translations': {'tj': 'ШНТМ', 'ru': 'ГРРП', 'eng': 'CDRS'},
        'description': 'ГРРП, Города и районы республиканского подчинения, западный Таджикистан',
        'cities': [
            {
                'translations': {'tj': 'Ваҳдат', 'ru': 'Вахдат', 'eng': 'Vahdat'},
                'description': 'Вахдат, ГРРП',
                'suburbs': [
                    {'translations': {'tj': 'Марказ', 'ru': 'Центр', 'eng': 'Center'}},
                ],
            },
        ],
        'districts': [
            {
                'translations': {'tj': 'Рӯдакӣ', 'ru': 'Рудаки', 'eng': 'Rudaki'},
                'description': 'Район Рудаки',
                'settlements': [
                    {
                        'translations': {'tj': 'Сомониён', 'ru': 'Сомониён', 'eng': 'Somoniyon'},
                        'villages': [
                            {'translations': {'tj': 'Чорбоғ', 'ru': 'Чорбог', 'eng': 'Chorbogh'}},
                        ],
                    },
                ],
                'communities': [
                    {'translations': {'tj': 'Ҷамоати Россия', 'ru': 'Джамоат Россия', 'eng': 'Rossiya Jamoat'}},
                ],
            },
            {
                'translations': {'tj': 'Хуросон', 'ru': 'Хуросон', 'eng': 'Khuroson'},
                'description': 'Район Хуросон',
            },
        ],
    },
    {
        'translations': {'tj': 'Вилояти Суғд', 'ru': 'Согдийская область', 'eng': 'Sughd Province'},
        'description': 'Согдийская область, северный Таджикистан',
        'cities': [
            {
                'translations': {'tj': 'Хуҷанд', 'ru': 'Худжанд', 'eng': 'Khujand'},
                'description': 'Худжанд, Согдийская область',
                'suburbs': [
                    {'translations': {'tj': 'Марказ', 'ru': 'Центр', 'eng': 'Center'}},
                    {'translations': {'tj': 'Пањшанбе', 'ru': 'Панчшанбе', 'eng': 'Panjshanbe'}},
                ],
            },
        ],
        'districts': [
            {
                'translations': {'tj': 'Бобоҷон Ғафуров', 'ru': 'Бободжон Гафуров', 'eng': 'Bobojon Ghafurov'},
                'communities': [
                    {'translations': {'tj': 'Ҷамоати Унҷӣ', 'ru': 'Джамоат Унджи', 'eng': 'Unji Jamoat'}},
                ],
            },
        ],
    },
    {
        'translations': {'tj': 'Вилояти Хатлон', 'ru': 'Хатлонская область', 'eng': 'Khatlon Province'},
        'description': 'Хатлонская область, южный Таджикистан',
        'cities': [
            {
                'translations': {'tj': 'Бохтар', 'ru': 'Бохтар', 'eng': 'Bokhtar'},
                'description': 'Бохтар, Хатлонская область',
            },
        ],
        'districts': [
            {
                'translations': {'tj': 'Восеъ', 'ru': 'Восе', 'eng': 'Vose'},
                'settlements': [
                    {'translations': {'tj': 'Восеъ', 'ru': 'Восе', 'eng': 'Vose'}},
                ],
            },
        ],
    },
    {
        'translations': {'tj': 'ВМКБ', 'ru': 'ГБАО', 'eng': 'GBAO'},
        'description': 'ГБАО, Горно-Бадахшанская Автономная область, восточный Таджикистан',
        'cities': [
            {
                'translations': {'tj': 'Мурғоб', 'ru': 'Мургаб', 'eng': 'Murghob'},
                'description': 'Мургаб, ГБАО',
            },
        ],
        'districts': [
            {
                'translations': {'tj': 'Роштқалъа', 'ru': 'Рошткала', 'eng': 'Roshtqala'},
                'settlements': [
                    {
                        'translations': {'tj': 'Хоруғ', 'ru': 'Хорог', 'eng': 'Khorog'},
                        'villages': [
                            {'translations': {'tj': 'Сучон', 'ru': 'Сучан', 'eng': 'Suchan'}},
                        ],
                    },
                ],
            },
        ],
    },
]
